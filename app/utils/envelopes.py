from typing import Any, Dict, Optional


def api_success(data: Any, **meta: Any) -> Dict[str, Any]:
	"""Success envelope; ``meta`` adds top-level fields such as ``count`` or ``pagination``."""
	envelope: Dict[str, Any] = {"success": True, "data": data, "error": None}
	envelope.update(meta)
	return envelope


def api_list(items: list[Any], total: Optional[int] = None, page: Optional[int] = None, limit: Optional[int] = None) -> Dict[str, Any]:
	meta: Dict[str, Any] = {"count": len(items)}
	if total is not None and page is not None and limit:
		meta["pagination"] = {"total": total, "page": page, "pages": -(-total // limit)}
	return api_success(items, **meta)


def api_error(code: str, message: str, details: Optional[Any] = None) -> Dict[str, Any]:
	error: Dict[str, Any] = {"code": code, "message": message}
	if details is not None:
		error["details"] = details
	return {"success": False, "data": None, "error": error}
