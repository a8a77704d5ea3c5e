from .version import __version__ as __version__

__title__ = "VMPCKit"
__description__ = "A pure Python implementation of the VMPC stream cipher."
__license__ = "Apache-2.0"
