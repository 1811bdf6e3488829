__version__ = "0.1.0"

def generate_bindings(module, namespace: str) -> dict[str, str]:
    from .compiler import generate
    from .config import CodegenConfig
    return generate(module, CodegenConfig(namespace))

__all__ = ["__version__", "generate_bindings"]
