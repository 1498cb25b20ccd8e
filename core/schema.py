from rest_framework.permissions import AllowAny
from rest_framework.renderers import JSONOpenAPIRenderer
from rest_framework.response import Response
from rest_framework.schemas.openapi import AutoSchema, SchemaGenerator
from rest_framework.views import APIView


PUBLIC_PATHS = {
    "/api/health/",
    "/api/mentors/",
    "/api/schema/",
}

TAGS = [
    ("Auth", "Identity verification and role onboarding."),
    ("Mentor", "Mentor dashboard, sessions, mentees and earnings."),
    ("Student", "Student sessions, mentors and payment confirmation."),
    ("Public", "Endpoints that need no token."),
    ("General", "Other endpoints."),
]
TAG_ORDER = {name: index for index, (name, _) in enumerate(TAGS)}

# Checked in order; the first matching prefix wins.
TAG_PREFIXES = [
    ("/api/auth/", "Auth"),
    ("/api/role-onboarding/", "Auth"),
    ("/api/mentor-sessions/confirm-payment/", "Student"),
    ("/api/mentor/", "Mentor"),
    ("/api/mentor-", "Mentor"),
    ("/api/student/", "Student"),
    ("/api/student-", "Student"),
]

BEARER_SCHEME = {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
HTTP_METHODS = {"get", "post", "put", "patch", "delete"}


class MentorshipAutoSchema(AutoSchema):
    def get_operation_id(self, path, method):
        return super().get_operation_id(path, method) + method.capitalize()


def tag_for_path(path: str) -> str:
    if path in PUBLIC_PATHS:
        return "Public"
    for prefix, tag in TAG_PREFIXES:
        if path.startswith(prefix):
            return tag
    return "General"


class MentorshipSchemaGenerator(SchemaGenerator):
    """OpenAPI document with bearer security on protected paths and paths grouped by tag."""

    def get_schema(self, request=None, public=False):
        schema = super().get_schema(request=request, public=public)
        if not schema:
            return schema

        schema.setdefault("components", {}).setdefault("securitySchemes", {})["HTTPBearer"] = BEARER_SCHEME
        schema["tags"] = [{"name": name, "description": text} for name, text in TAGS]

        paths = schema.get("paths", {})
        for path, operations in paths.items():
            tag = tag_for_path(path)
            for method, operation in operations.items():
                if method.lower() not in HTTP_METHODS:
                    continue
                operation["tags"] = [tag]
                if path in PUBLIC_PATHS:
                    operation.pop("security", None)
                else:
                    operation["security"] = [{"HTTPBearer": []}]

        ordered = sorted(paths, key=lambda item: (TAG_ORDER[tag_for_path(item)], item))
        schema["paths"] = {path: paths[path] for path in ordered}
        return schema


class MentorshipSchemaView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    renderer_classes = [JSONOpenAPIRenderer]
    schema = None

    def get(self, request, *args, **kwargs):
        generator = MentorshipSchemaGenerator(
            title="Mentorship Marketplace API",
            description="Backend APIs for mentor, student and founder workflows.",
            version="1.0.0",
        )
        return Response(generator.get_schema(request=request, public=True) or {})
