from .briefs import briefs_bp
from .health import health_bp

__all__ = ['briefs_bp', 'health_bp']
