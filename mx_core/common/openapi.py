# mx_core/common/openapi.py
from __future__ import annotations

from drf_spectacular.openapi import AutoSchema
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter


class MXAutoSchema(AutoSchema):
    """
    Adds the X-Clinic-Id scope header to every scoped endpoint.
    Auth, /me and the schema/docs views are left unscoped.
    """

    SCOPE_HEADER = OpenApiParameter(
        name="X-Clinic-Id",
        type=OpenApiTypes.UUID,
        location=OpenApiParameter.HEADER,
        required=True,
        description="Clinic scope UUID (required for scoped endpoints).",
    )

    UNSCOPED_VIEWS = {"SpectacularAPIView", "SpectacularSwaggerView", "MeView"}

    def _is_unscoped_endpoint(self) -> bool:
        view = getattr(self, "view", None)
        if view is None:
            return False

        if view.__class__.__name__ in self.UNSCOPED_VIEWS:
            return True

        module = view.__class__.__module__ or ""
        return module == "mx_core.iam.api.auth"

    def get_override_parameters(self):
        params = list(super().get_override_parameters() or [])

        if not self._is_unscoped_endpoint():
            if not any(p.name.lower() == "x-clinic-id" for p in params):
                params.append(self.SCOPE_HEADER)

        return params
