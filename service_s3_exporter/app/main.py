"""
S3 exporter service.
"""

from typing import Dict, Optional

from fastapi import Request, Response
from fastapi.responses import HTMLResponse
from prometheus_client import CONTENT_TYPE_LATEST

from shared.base_service import BaseService
from shared.config import ServiceConfig

from . import __version__
from .client import create_s3_client
from .discovery import discover_targets
from .exporters.prometheus import render_probe
from .probe import ProbeQuery, ProbeRunner

SERVICE_NAME = "s3_exporter"


class S3ExporterService(BaseService):
    """S3 exporter service implementation."""

    version = __version__

    def __init__(self, config: Optional[ServiceConfig] = None, s3_client=None):
        super().__init__(SERVICE_NAME, config)

        self.s3_client = s3_client if s3_client is not None else create_s3_client(self.config)
        self.runner = ProbeRunner(self.s3_client, self.config, self.metrics)

        self._setup_exporter_routes()

        self.logger.info(
            "S3 exporter configured",
            version=self.version,
            endpoint_url=self.config.s3_endpoint_url,
            bucket=self.config.s3_bucket,
            prefixes=self.config.s3_prefixes,
            storage_class=self.config.s3_storage_class,
            list_object_versions=self.config.s3_list_object_versions
        )

    def _setup_exporter_routes(self):
        """Set up exporter-specific routes."""
        probe_path = self.config.probe_path
        metrics_path = self.config.metrics_path
        discovery_path = self.config.discovery_path

        @self.app.get("/", response_class=HTMLResponse)
        async def root():
            """Landing page."""
            return f"""<html>
<head><title>AWS S3 Exporter</title></head>
<body>
<h1>AWS S3 Exporter</h1>
<p><a href="{probe_path}?bucket=BUCKET&prefix=PREFIX">Query metrics for objects in BUCKET that match PREFIX</a></p>
<p><a href="{metrics_path}">Metrics</a></p>
<p><a href="{discovery_path}">Service Discovery</a></p>
</body>
</html>"""

        # Plain def: the storage calls block, so FastAPI runs each probe in
        # its own worker thread.
        @self.app.get(probe_path)
        def probe(request: Request):
            """List a bucket/prefix and export what was found."""
            query = ProbeQuery.from_params(request.query_params, self.config)
            results = self.runner.run(query)
            return Response(
                content=render_probe(query, results),
                media_type=CONTENT_TYPE_LATEST
            )

        @self.app.get(discovery_path)
        def discovery(request: Request):
            """Every visible bucket as a probe target."""
            host = request.headers.get("host") or request.url.netloc
            return discover_targets(self.s3_client, host)

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check exporter dependencies."""
        return {
            "s3_client": "ok" if self.s3_client is not None else "error"
        }


def create_app(config: Optional[ServiceConfig] = None, s3_client=None):
    """Create S3 exporter application."""
    service = S3ExporterService(config=config, s3_client=s3_client)
    return service.app


def main():
    """Console entry point."""
    service = S3ExporterService()
    service.run()


if __name__ == "__main__":
    main()
