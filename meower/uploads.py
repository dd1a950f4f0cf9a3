from enum import Enum
from typing import IO, Optional, Union
import asyncio, logging

from meower.errors import ApiError
from meower.models import ApiAttachment, parse_record
from meower.session import ApiResponse, ApiSession
from meower.utils import log


class UploadType(str, Enum):
    ATTACHMENTS = "attachments"
    ICONS = "icons"
    STICKERS = "stickers"
    EMOJIS = "emojis"


class Uploads:
    """Access to the uploads server. Shares the HTTP session and token with the REST API."""

    def __init__(self, base_url: str, session: ApiSession):
        self.base_url = base_url.rstrip("/")
        self.session = session

    def _post(self, url: str, file: Union[bytes, IO[bytes]], filename: Optional[str]) -> ApiResponse:
        resp = self.session.http.request(
            "POST",
            url,
            headers={"Authorization": f"Bearer {self.session.token}"},
            files={"file": (filename or "file", file)},
            timeout=self.session.timeout
        )
        try:
            body = resp.json()
        except ValueError:
            body = None
        return ApiResponse(resp.status_code, body)

    async def upload_file(
        self,
        file: Union[bytes, IO[bytes]],
        upload_type: UploadType = UploadType.ATTACHMENTS,
        filename: Optional[str] = None
    ) -> ApiAttachment:
        url = f"{self.base_url}/{UploadType(upload_type).value}"
        resp = await asyncio.to_thread(self._post, url, file, filename)
        if resp.failed:
            log(f"POST {url} failed ({resp.status}): {resp.body}", logging.DEBUG)
            raise ApiError("failed to upload file", resp.body)

        return parse_record(ApiAttachment, resp.body, "response is not an attachment")

    def get_file_url(self, attachment: ApiAttachment, upload_type: UploadType = UploadType.ATTACHMENTS) -> str:
        return f"{self.base_url}/{UploadType(upload_type).value}/{attachment.id}/{attachment.filename}"
