"""Signed upload handshake for new assets."""

import logging
from typing import Optional

from ..api import StoryblokClient
from ..exceptions import StoryblokAPIError, UploadFailedError
from ..models import RemoteAsset, SignedUploadTicket
from .scanner import LocalFile

logger = logging.getLogger(__name__)


class UploadHandshake:
    """Uploads one file as a new asset in three steps.

    1. sign: request upload credentials for the file name
    2. transfer: post the signed form fields and the file to the blob store
    3. finalize: confirm the upload and fetch the final asset record

    A failure in any step raises :class:`UploadFailedError` naming the step.
    """

    def __init__(self, client: StoryblokClient, asset_folder_id: Optional[int] = None):
        """Initialize the handshake.

        Args:
            client: Storyblok API client
            asset_folder_id: Destination asset folder (None for the root)
        """
        self.client = client
        self.asset_folder_id = asset_folder_id

    def upload(self, local_file: LocalFile) -> RemoteAsset:
        """Upload a local file.

        Args:
            local_file: File to upload

        Returns:
            The finalized remote asset

        Raises:
            UploadFailedError: If the sign, transfer or finalize step fails
        """
        ticket = self.sign(local_file)
        self.transfer(local_file, ticket)
        return self.finalize(ticket)

    def sign(self, local_file: LocalFile) -> SignedUploadTicket:
        try:
            response = self.client.sign_asset_upload(
                local_file.name, asset_folder_id=self.asset_folder_id
            )
            ticket = SignedUploadTicket.from_api_response(response)
        except StoryblokAPIError as e:
            raise UploadFailedError("sign", str(e), cause=e) from e
        except KeyError as e:
            raise UploadFailedError(
                "sign", f"invalid signed response, missing {e}", cause=e
            ) from e
        except (TypeError, ValueError) as e:
            raise UploadFailedError(
                "sign", f"invalid signed response: {e}", cause=e
            ) from e

        logger.debug(f"Got signed upload for {local_file.name} (id {ticket.asset_id})")
        return ticket

    def transfer(self, local_file: LocalFile, ticket: SignedUploadTicket) -> None:
        try:
            self.client.upload_to_blob_store(
                ticket.post_url,
                ticket.fields,
                local_file.path,
                mime_type=local_file.mime_hint,
            )
        except (StoryblokAPIError, OSError) as e:
            raise UploadFailedError("transfer", str(e), cause=e) from e

        logger.debug(f"Transferred {local_file.name} to blob store")

    def finalize(self, ticket: SignedUploadTicket) -> RemoteAsset:
        try:
            response = self.client.finish_asset_upload(ticket.asset_id)
            asset = RemoteAsset.from_api_response(response)
        except StoryblokAPIError as e:
            raise UploadFailedError("finalize", str(e), cause=e) from e
        except KeyError as e:
            raise UploadFailedError(
                "finalize", f"invalid asset response, missing {e}", cause=e
            ) from e
        except (TypeError, ValueError) as e:
            raise UploadFailedError(
                "finalize", f"invalid asset response: {e}", cause=e
            ) from e

        logger.debug(f"Finalized asset {asset.id}: {asset.filename}")
        return asset
