# LDExpand JSON-LD context processing and expansion library
__all__ = [
    '__copyright__', '__license__', '__version__'
]

__copyright__ = 'Copyright (c) 2020-2026 LDExpand contributors'
__license__ = 'New BSD license'
__version__ = '1.0.0'
