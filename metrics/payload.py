"""Metric forwarder payload envelope"""
from typing import Any, Dict, List
from .models import DataPoint


def build_instance(points: List[DataPoint], config) -> Dict[str, Any]:
    return {
        "id": config.instance_id,
        "index": config.instance_index,
        "metrics": [point.to_dict() for point in points],
    }


def build_application(points: List[DataPoint], config) -> Dict[str, Any]:
    return {
        "id": config.app_guid,
        "instances": [build_instance(points, config)],
    }


def build_payload(points: List[DataPoint], config) -> Dict[str, Any]:
    """Wrap a batch in exactly one application containing exactly one instance"""
    return {"applications": [build_application(points, config)]}
