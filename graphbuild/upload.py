"""IPFS upload of build artifacts."""

from __future__ import annotations

import copy
import json
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

import yaml

from .logging import get_logger
from .models import Artifacts

logger = get_logger("upload")


class UploadError(RuntimeError):
    """Raised when the IPFS node rejects or cannot receive a file."""


@dataclass
class UploadRequest:
    endpoint: str
    name: str
    data: bytes
    timeout: float


class IpfsClient:
    """Minimal client for the IPFS HTTP API ``add`` endpoint."""

    def __init__(
        self,
        address: str,
        *,
        request_timeout: float = 60.0,
        sender: Callable[[UploadRequest], Dict[str, Any]] | None = None,
    ) -> None:
        self.base_url = self._normalize_address(address)
        self.request_timeout = request_timeout
        self._sender = sender or self._http_sender

    def add(self, data: bytes, name: str = "file") -> str:
        """Upload ``data`` and return its content identifier."""
        request = UploadRequest(
            endpoint=f"{self.base_url}/api/v0/add",
            name=name,
            data=data,
            timeout=self.request_timeout,
        )
        payload = self._sender(request)
        content_id = payload.get("Hash")
        if not isinstance(content_id, str) or not content_id:
            raise UploadError(f"IPFS node returned no hash for {name}")
        logger.debug("Uploaded %s => %s", name, content_id)
        return content_id

    @staticmethod
    def _normalize_address(address: str) -> str:
        value = address.strip().rstrip("/")
        if "://" not in value:
            value = f"http://{value}"
        return value

    @staticmethod
    def _http_sender(request: UploadRequest) -> Dict[str, Any]:
        boundary = uuid.uuid4().hex
        body = b"".join(
            [
                f"--{boundary}\r\n".encode("utf-8"),
                (
                    f'Content-Disposition: form-data; name="file"; filename="{request.name}"\r\n'
                    "Content-Type: application/octet-stream\r\n\r\n"
                ).encode("utf-8"),
                request.data,
                f"\r\n--{boundary}--\r\n".encode("utf-8"),
            ]
        )
        headers = {"Content-Type": f"multipart/form-data; boundary={boundary}"}
        http_request = Request(request.endpoint, data=body, headers=headers, method="POST")
        try:
            with urlopen(http_request, timeout=request.timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:  # pragma: no cover - depends on runtime
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise UploadError(f"IPFS upload failed with status {exc.code}: {message}") from exc
        except URLError as exc:  # pragma: no cover - depends on runtime
            raise UploadError(f"IPFS upload failed: {exc.reason}") from exc

        try:
            return json.loads(raw.decode("utf-8").strip().splitlines()[-1])
        except (IndexError, json.JSONDecodeError) as exc:
            raise UploadError("IPFS node returned an invalid response") from exc


def publish_artifacts(artifacts: Artifacts, client: IpfsClient) -> str:
    """Upload every file the output manifest references, then the manifest itself.

    File references in the uploaded manifest are replaced by IPFS links.
    Returns the content identifier of the manifest.
    """
    if artifacts.manifest is None:
        raise UploadError("Nothing to upload: the build produced no manifest")
    output_dir = artifacts.manifest.parent
    data = yaml.safe_load(artifacts.manifest.read_text(encoding="utf-8"))
    linked = copy.deepcopy(data)

    linked["schema"]["file"] = _link(client, output_dir, data["schema"]["file"])
    for source in linked.get("dataSources", []):
        mapping = source["mapping"]
        mapping["file"] = _link(client, output_dir, mapping["file"])
        for abi in mapping.get("abis", []):
            abi["file"] = _link(client, output_dir, abi["file"])

    text = yaml.safe_dump(linked, sort_keys=False)
    return client.add(text.encode("utf-8"), name=artifacts.manifest.name)


def _link(client: IpfsClient, output_dir: Path, relative: str) -> Dict[str, str]:
    path = output_dir / relative
    content_id = client.add(path.read_bytes(), name=path.name)
    return {"/": f"/ipfs/{content_id}"}


__all__ = ["IpfsClient", "UploadError", "UploadRequest", "publish_artifacts"]
