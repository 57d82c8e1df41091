"""
declkit - TypeScript declaration generation for processed API schemas
"""

def _check_dependencies():
    """Check for required dependencies"""
    try:
        import pydantic
    except ImportError:
        raise ImportError(
            "declkit requires pydantic to be installed.\n"
            "Install with: pip install pydantic"
        )

# Check dependencies on import
_check_dependencies()

# Import main API only after dependency check
from .core.config import get_version, load_declkit_config, DeclkitConfig
from .core.integrator import generate_declarations, generate_from_json, load_api_document
from .generators.typescript.pipeline import render_api

__version__ = get_version()

__all__ = [
    # Main functions
    'generate_declarations',
    'generate_from_json',
    'render_api',
    'load_api_document',
    'load_declkit_config',

    # Configuration
    'DeclkitConfig',

    # Version
    '__version__'
]
