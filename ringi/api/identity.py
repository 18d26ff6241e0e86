from fastapi import Depends, HTTPException, Request

from ringi.api.core.container import Container, get_container


def get_current_user(
    request: Request,
    container: Container = Depends(get_container),
) -> str:
    """Verified e-mail of the caller, as forwarded by the authenticating proxy.

    Identity never comes from the request body or query string.
    """
    header = container.settings.identity_header
    email = request.headers.get(header, "").strip().lower()
    if not email:
        raise HTTPException(
            status_code=401,
            detail=f"Missing authenticated identity header '{header}'",
        )
    return email
