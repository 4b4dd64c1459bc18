import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

from fastapi import status
from fastapi.responses import RedirectResponse

logger = logging.getLogger(__name__)


# Send a failed form submission back to its list page, keeping what the user typed
def redirect_with_error(path: str, message: str, form_data: Dict[str, Any]) -> RedirectResponse:
    query = urlencode({"error": message, "formData": json.dumps(form_data)}, quote_via=quote)
    return RedirectResponse(url=f"{path}?{query}", status_code=status.HTTP_303_SEE_OTHER)


def redirect_to(path: str) -> RedirectResponse:
    return RedirectResponse(url=path, status_code=status.HTTP_303_SEE_OTHER)


def decode_form_data(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed formData parameter")
        return {}
    return data if isinstance(data, dict) else {}
