from flask import Blueprint, request

from lecture_briefs.extensions import get_runtime
from lecture_briefs.services import brief_api_service

briefs_bp = Blueprint('briefs_api', __name__)


@briefs_bp.route('/api/briefs', methods=['POST'])
def create_brief():
    return brief_api_service.create_brief(get_runtime(), request)


@briefs_bp.route('/api/briefs/<lecture_id>', methods=['GET'])
def get_brief(lecture_id):
    return brief_api_service.get_brief(get_runtime(), lecture_id)
