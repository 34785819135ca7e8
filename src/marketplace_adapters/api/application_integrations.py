"""Application Integrations capability module for Amazon SP-API."""

from typing import Any, Optional

from ..utils.decorators import handle_api_errors
from .base import ApiResponse, BaseCapabilityModule


class ApplicationIntegrationsModule(BaseCapabilityModule):
    """Module for posting notifications into Seller Central."""

    CAPABILITY = "applicationIntegrations"
    DEFAULT_API_VERSION = "2024-04-01"

    def get_api_path(self) -> str:
        return f"/appIntegrations/{self.api_version}"

    @handle_api_errors()
    async def create_notification(
        self,
        template_id: str,
        notification_parameters: dict[str, Any],
        selling_partner_id: Optional[str] = None,
    ) -> ApiResponse:
        self._require(template_id, "Template ID is required", "create_notification")
        body: dict[str, Any] = {
            "templateId": template_id,
            "notificationParameters": notification_parameters,
            "marketplaceId": self.marketplace_id,
        }
        if selling_partner_id:
            body["sellingPartnerId"] = selling_partner_id
        return await self._make_request("POST", f"{self.get_api_path()}/notifications", data=body)

    @handle_api_errors()
    async def delete_notifications(self, template_id: str, deletion_reason: str) -> ApiResponse:
        self._require(template_id, "Template ID is required", "delete_notifications")
        self._require(deletion_reason, "Deletion reason is required", "delete_notifications")
        return await self._make_request(
            "POST",
            f"{self.get_api_path()}/notifications/deletion",
            data={"templateId": template_id, "deletionReason": deletion_reason},
        )

    @handle_api_errors()
    async def record_action_feedback(self, notification_id: str, feedback_action_code: str) -> ApiResponse:
        self._require(notification_id, "Notification ID is required", "record_action_feedback")
        return await self._make_request(
            "POST",
            f"{self.get_api_path()}/notifications/{notification_id}/feedback",
            data={"feedbackActionCode": feedback_action_code},
        )
