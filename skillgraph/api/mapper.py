"""
API Mapper
==========

Transforms renderer snapshots (GraphView) and engine errors into JSON
DTOs. Positions are rounded for the wire; nothing else is altered.
"""
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict

from ..contracts.base import Error
from ..core.loader import LoadReport
from ..frontend.visualization import EdgeView, GraphView, NodeView

POSITION_PRECISION = 2


def map_node_to_dto(node: NodeView) -> Dict[str, Any]:
    dto = asdict(node)
    dto["x"] = round(node.x, POSITION_PRECISION)
    dto["y"] = round(node.y, POSITION_PRECISION)
    return dto


def map_edge_to_dto(edge: EdgeView) -> Dict[str, Any]:
    return asdict(edge)


def map_view_to_dto(view: GraphView) -> Dict[str, Any]:
    """Map GraphView to the GraphDTO consumed by renderers."""
    return {
        "version": view.version,
        "generated_at": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        "alpha": view.alpha,
        "is_running": view.is_running,
        "is_quiescent": view.is_quiescent,
        "selected_id": view.selected_id,
        "hovered_id": view.hovered_id,
        "highlighted_ids": sorted(view.highlighted_ids),
        "nodes": [map_node_to_dto(n) for n in view.nodes],
        "edges": [map_edge_to_dto(e) for e in view.edges],
    }


def map_report_to_dto(report: LoadReport) -> Dict[str, Any]:
    return {
        "accepted": list(report.accepted),
        "skipped": [
            {"index": s.index, "record_id": s.record_id, "reason": s.reason}
            for s in report.skipped
        ],
    }


def map_error_to_dto(error: Error) -> Dict[str, Any]:
    return {
        "code": error.code.name,
        "message": error.message,
        "context": dict(error.context),
    }
