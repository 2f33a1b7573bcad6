from django.urls import path

from .consumers import ReportMetricsConsumer

websocket_urlpatterns = [
    path("ws/grading/metrics/", ReportMetricsConsumer.as_asgi()),
]
