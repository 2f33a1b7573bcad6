from django.conf import settings
from django.http import HttpResponse


class SimpleCorsMiddleware:
    """
    Lets the dashboard and report export front-ends call the grading API from another origin.
    CORS_ALLOWED_ORIGINS = ["*"] allows every origin.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.allowed = set(getattr(settings, "CORS_ALLOWED_ORIGINS", ["*"]))

    def __call__(self, request):
        if request.method == "OPTIONS":
            response = HttpResponse()
        else:
            response = self.get_response(request)

        origin = request.headers.get("Origin")
        if not origin or ("*" not in self.allowed and origin not in self.allowed):
            return response
        response["Access-Control-Allow-Origin"] = origin if "*" not in self.allowed else "*"
        response["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response["Access-Control-Allow-Headers"] = request.headers.get(
            "Access-Control-Request-Headers", "Content-Type, Authorization"
        )
        return response
