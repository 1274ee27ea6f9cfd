# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
HAL (Hypertext Application Language) response formatting utilities.
Implements HATEOAS Level-3 API responses with conditional affordance links.
"""

from typing import Dict, List, Any, Optional
from urllib.parse import urljoin, urlencode

from domain.lifecycle import is_terminal
from models.entities import ActorContext
from models.enums import ComplaintStatus
from models.responses import HalLink


class HalLinkBuilder:
    """Builder for HAL links with proper URL construction."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/') + '/'

    def build_link(
        self,
        path: str,
        method: str = "GET",
        content_type: Optional[str] = None,
        title: Optional[str] = None,
        templated: bool = False
    ) -> HalLink:
        """Build a HAL link with proper URL construction."""
        href = urljoin(self.base_url, path.lstrip('/'))

        return HalLink(
            href=href,
            method=method,
            type=content_type,
            title=title,
            templated=templated or None
        )

    def build_self_link(self, resource_path: str) -> HalLink:
        """Build self link for a resource."""
        return self.build_link(resource_path, title="Self")

    def build_action_link(
        self,
        resource_path: str,
        action: str,
        method: str = "POST",
        title: Optional[str] = None
    ) -> HalLink:
        """Build action link for a resource."""
        action_path = f"{resource_path}/{action}"
        return self.build_link(
            action_path,
            method=method,
            content_type="application/json",
            title=title or action.title()
        )


class PaginationLinkBuilder:
    """Builder for pagination links in HAL collections."""

    def __init__(self, base_url: str):
        self.link_builder = HalLinkBuilder(base_url)

    def _page_link(self, base_path: str, params: Dict[str, Any], page: int, limit: int, title: str) -> HalLink:
        query = urlencode({**params, 'page': page, 'limit': limit})
        return self.link_builder.build_link(f"{base_path}?{query}", title=title)

    def build_pagination_links(
        self,
        base_path: str,
        current_page: int,
        total_pages: int,
        limit: int,
        query_params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, HalLink]:
        """Build pagination links for a collection."""
        params = {k: v for k, v in (query_params or {}).items() if v is not None}
        links = {'self': self._page_link(base_path, params, current_page, limit, "Current page")}

        if current_page > 1:
            links['first'] = self._page_link(base_path, params, 1, limit, "First page")
            links['prev'] = self._page_link(base_path, params, current_page - 1, limit, "Previous page")

        if current_page < total_pages:
            links['next'] = self._page_link(base_path, params, current_page + 1, limit, "Next page")
            links['last'] = self._page_link(base_path, params, total_pages, limit, "Last page")

        return links


class AffordanceLinkBuilder:
    """Builder for conditional affordance links based on role and complaint state."""

    def __init__(self, base_url: str):
        self.link_builder = HalLinkBuilder(base_url)

    def build_complaint_affordances(
        self,
        complaint: Dict[str, Any],
        actor: ActorContext,
        has_feedback: bool = False
    ) -> Dict[str, HalLink]:
        """
        Build links for a complaint viewed by its owner or an admin.

        Args:
            complaint: Serialized complaint view (camelCase keys)
            actor: Viewing actor
            has_feedback: Whether the complaint already has feedback

        Returns:
            Dictionary of HAL links
        """
        complaint_id = complaint['id']
        status = complaint.get('status')
        links = {
            'self': self.link_builder.build_self_link(f"/api/complaints/{complaint_id}"),
            'track': self.link_builder.build_link(
                f"/api/public/track/{complaint['trackingId']}",
                title="Public tracking"
            )
        }

        if actor.is_admin():
            admin_path = f"/api/admin/complaints/{complaint_id}"
            if not is_terminal(status):
                links['transition'] = self.link_builder.build_action_link(
                    admin_path, "transition", title="Change status"
                )
            if not complaint.get('isPublic'):
                links['publish'] = self.link_builder.build_action_link(
                    admin_path, "publish", title="Publish"
                )
        elif complaint.get('ownerId', actor.subject_id) == actor.subject_id:
            if status == ComplaintStatus.RESOLVED.value and not has_feedback:
                links['feedback'] = self.link_builder.build_action_link(
                    f"/api/complaints/{complaint_id}", "feedback", title="Rate resolution"
                )

        return links

    def build_public_complaint_links(self, complaint: Dict[str, Any]) -> Dict[str, HalLink]:
        return {
            'self': self.link_builder.build_link(
                f"/api/public/track/{complaint['trackingId']}",
                title="Public tracking"
            )
        }


class HalResponseBuilder:
    """Main HAL response builder with comprehensive formatting capabilities."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')
        self.link_builder = HalLinkBuilder(base_url)
        self.pagination_builder = PaginationLinkBuilder(base_url)
        self.affordance_builder = AffordanceLinkBuilder(base_url)

    @staticmethod
    def dump_links(links: Dict[str, HalLink]) -> Dict[str, Dict[str, Any]]:
        return {rel: link.model_dump(exclude_none=True) for rel, link in links.items()}

    def build_resource_response(self, data: Dict[str, Any], links: Dict[str, HalLink]) -> Dict[str, Any]:
        """Attach links to a resource representation."""
        response = dict(data)
        response['_links'] = self.dump_links(links)
        return response

    def build_collection_response(
        self,
        items: List[Dict[str, Any]],
        pagination: Dict[str, Any],
        collection_path: str,
        query_params: Optional[Dict[str, Any]] = None,
        extra: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Build a collection response with pagination links.

        Args:
            items: Serialized items
            pagination: Pagination block with page, limit, total and totalPages
            collection_path: Path of the collection endpoint
            query_params: Active filters to carry into pagination links
            extra: Additional top-level members such as stats

        Returns:
            Collection response dictionary
        """
        pagination_links = self.pagination_builder.build_pagination_links(
            collection_path,
            pagination['page'],
            pagination['totalPages'],
            pagination['limit'],
            query_params
        )

        response = {
            'items': items,
            'pagination': pagination,
        }
        if extra:
            response.update(extra)
        response['_links'] = self.dump_links(pagination_links)
        return response

    def build_error_response(
        self,
        error_type: str,
        title: str,
        status: int,
        detail: str,
        instance: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """Build RFC 7807 compliant error response with HAL links."""
        error_response = {
            'type': f"{self.base_url}/problems/{error_type}",
            'title': title,
            'status': status,
            'detail': detail,
            'instance': instance
        }

        if validation_errors:
            error_response['errors'] = validation_errors

        links = {
            'help': self.link_builder.build_link(
                f"/docs/errors#{error_type}",
                title="Error documentation"
            )
        }
        if error_type == "validation-error":
            links['schema'] = self.link_builder.build_link(
                "/openapi/openapi.json",
                title="API schema"
            )

        error_response['_links'] = self.dump_links(links)
        return error_response


class HalFormatter:
    """High-level HAL formatter with convenience methods."""

    def __init__(self, base_url: str):
        self.builder = HalResponseBuilder(base_url)

    def format_complaint(
        self,
        complaint: Dict[str, Any],
        actor: ActorContext,
        has_feedback: bool = False
    ) -> Dict[str, Any]:
        """Format a complaint seen by its owner or an admin."""
        links = self.builder.affordance_builder.build_complaint_affordances(complaint, actor, has_feedback)
        return self.builder.build_resource_response(complaint, links)

    def format_complaint_collection(
        self,
        complaints: List[Dict[str, Any]],
        pagination: Dict[str, Any],
        actor: ActorContext,
        collection_path: str,
        filters: Optional[Dict[str, Any]] = None,
        extra: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        formatted = [self.format_complaint(complaint, actor) for complaint in complaints]
        return self.builder.build_collection_response(formatted, pagination, collection_path, filters, extra)

    def format_submission(self, submission: Dict[str, Any]) -> Dict[str, Any]:
        """Format the acknowledgement returned to the citizen who filed a complaint."""
        link_builder = self.builder.link_builder
        links = {
            'self': link_builder.build_self_link(f"/api/complaints/{submission['id']}"),
            'track': link_builder.build_link(
                f"/api/public/track/{submission['trackingId']}",
                title="Public tracking"
            )
        }
        return self.builder.build_resource_response(submission, links)

    def format_feedback(self, feedback: Dict[str, Any], complaint_id: str) -> Dict[str, Any]:
        links = {
            'complaint': self.builder.link_builder.build_link(
                f"/api/complaints/{complaint_id}",
                title="Complaint"
            )
        }
        return self.builder.build_resource_response(feedback, links)

    def format_public_complaint(self, complaint: Dict[str, Any]) -> Dict[str, Any]:
        links = self.builder.affordance_builder.build_public_complaint_links(complaint)
        return self.builder.build_resource_response(complaint, links)

    def format_public_collection(
        self,
        complaints: List[Dict[str, Any]],
        pagination: Dict[str, Any],
        filters: Optional[Dict[str, Any]] = None,
        extra: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Format the public transparency listing."""
        formatted = [self.format_public_complaint(complaint) for complaint in complaints]
        return self.builder.build_collection_response(
            formatted, pagination, "/api/public/complaints", filters, extra
        )

    def format_validation_error(
        self,
        detail: str,
        instance: str,
        validation_errors: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """Format a validation error response."""
        return self.builder.build_error_response(
            "validation-error",
            "Validation Error",
            400,
            detail,
            instance,
            validation_errors
        )

    def format_authentication_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format an authentication error response."""
        return self.builder.build_error_response(
            "authentication-required",
            "Authentication Required",
            401,
            detail,
            instance
        )

    def format_authorization_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format an authorization error response."""
        return self.builder.build_error_response(
            "insufficient-permissions",
            "Insufficient Permissions",
            403,
            detail,
            instance
        )

    def format_not_found_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a not found error response."""
        return self.builder.build_error_response(
            "resource-not-found",
            "Resource Not Found",
            404,
            detail,
            instance
        )

    def format_conflict_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a conflict error response."""
        return self.builder.build_error_response(
            "resource-conflict",
            "Resource Conflict",
            409,
            detail,
            instance
        )

    def format_rate_limit_error(self, detail: str, instance: str) -> Dict[str, Any]:
        return self.builder.build_error_response(
            "rate-limit-exceeded",
            "Rate Limit Exceeded",
            429,
            detail,
            instance
        )

    def format_service_unavailable_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a retryable store outage response."""
        return self.builder.build_error_response(
            "service-unavailable",
            "Service Unavailable",
            503,
            detail,
            instance
        )

    def format_server_error(self, detail: str, instance: str, status: int = 500) -> Dict[str, Any]:
        """Format a server error response."""
        return self.builder.build_error_response(
            "internal-server-error",
            "Internal Server Error",
            status,
            detail,
            instance
        )


# Convenience function for creating HAL formatter
def create_hal_formatter(base_url: str) -> HalFormatter:
    """Create a HAL formatter instance."""
    return HalFormatter(base_url)
