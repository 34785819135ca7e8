"""Authorization capability module for Amazon SP-API.

Token exchange is out of scope: the request function handed to the module
is expected to carry valid credentials already.
"""

from typing import Optional

from ..utils.decorators import handle_api_errors
from .base import ApiResponse, BaseCapabilityModule


class AuthorizationModule(BaseCapabilityModule):
    """Module for the SP-API Authorization endpoint."""

    CAPABILITY = "authorization"
    DEFAULT_API_VERSION = "v1"

    def get_api_path(self) -> str:
        return f"/authorization/{self.api_version}"

    @handle_api_errors()
    async def get_authorization_code(
        self,
        selling_partner_id: str,
        developer_id: str,
        mws_auth_token: Optional[str] = None,
    ) -> ApiResponse:
        """Get an LWA authorization code for a seller that already authorized MWS access."""
        self._require(selling_partner_id, "Selling partner ID is required", "get_authorization_code")
        self._require(developer_id, "Developer ID is required", "get_authorization_code")
        params = {"sellingPartnerId": selling_partner_id, "developerId": developer_id}
        if mws_auth_token:
            params["mwsAuthToken"] = mws_auth_token
        return await self._make_request("GET", f"{self.get_api_path()}/authorizationCode", params=params)
