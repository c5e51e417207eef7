from flask import Blueprint

from lecture_briefs.extensions import get_runtime
from lecture_briefs.services import brief_api_service

health_bp = Blueprint('health_api', __name__)


@health_bp.route('/api/health', methods=['GET'])
def health():
    return brief_api_service.get_health(get_runtime())
