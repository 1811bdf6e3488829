DEFAULT_RUNTIME_HEADER = "spacetimedb/bsatn/bsatn.h"
DEFAULT_RUNTIME_NAMESPACE = "SpacetimeDb::bsatn"
DEFAULT_TYPES_DIR = "Types"


class CodegenConfig:
    def __init__(self, namespace: str,
                 runtime_header: str = DEFAULT_RUNTIME_HEADER,
                 runtime_namespace: str = DEFAULT_RUNTIME_NAMESPACE,
                 types_dir: str = DEFAULT_TYPES_DIR):
        self.namespace = namespace                  # opened/closed verbatim in every file
        self.runtime_header = runtime_header        # provides Writer/Reader
        self.runtime_namespace = runtime_namespace
        self.types_dir = types_dir

    def __str__(self):
        return f"config(namespace={self.namespace}, runtime={self.runtime_header})"
