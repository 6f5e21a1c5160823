"""
bits-service Core Package

共享核心包，包含：
- common: 通用模块（配置、日志、异常、签名、HTTP 客户端）
- infrastructure: 基础设施适配（制品存储）
- environment: 进程级初始化
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "common",
    "environment",
    "infrastructure",
]


def __getattr__(name: str):
    if name in ("common", "environment", "infrastructure"):
        import importlib

        module = importlib.import_module(f"bits_core.{name}")
        globals()[name] = module
        return module
    raise AttributeError(f"module 'bits_core' has no attribute '{name}'")
