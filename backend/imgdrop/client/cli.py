"""
Command line client: upload one image through the presigned URL flow.

Usage:
    imgdrop-upload photo.png
    imgdrop-upload photo.png --server http://localhost:3000

Exit code is 0 when the store accepted the file (its URL is printed last)
and 1 otherwise.
"""
import argparse
import asyncio
import sys
from typing import Optional, Sequence

from imgdrop.client.credentials import CredentialClient
from imgdrop.client.orchestrator import UploadOrchestrator
from imgdrop.client.state import FileSelected, Transferring, UploadState, describe
from imgdrop.client.transfer import HttpTransferExecutor
from imgdrop.config import Settings
from imgdrop.models.upload import SelectedFile
from imgdrop.utils.logging import configure_logging


def _print_state(state: UploadState) -> None:
    if isinstance(state, Transferring):
        print(f"\r{describe(state)}", end="", flush=True)
        if state.progress == 100:
            print()
        return
    print(describe(state), flush=True)


async def upload_file(file: SelectedFile, server_url: str) -> Optional[str]:
    """
    Upload one file, printing every state change.

    Returns:
        Read URL on success, None otherwise
    """
    async with CredentialClient(server_url) as credentials, HttpTransferExecutor() as executor:
        orchestrator = UploadOrchestrator(credentials, executor)
        orchestrator.subscribe(_print_state)

        if not isinstance(orchestrator.initiate(file), FileSelected):
            return None
        return await orchestrator.execute()


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = Settings()

    parser = argparse.ArgumentParser(description='Upload an image via a presigned URL')
    parser.add_argument('path', help='Image file to upload')
    parser.add_argument('--server', default=settings.upload_server_url,
                        help=f'Upload server URL (default: {settings.upload_server_url})')
    parser.add_argument('--content-type', default=None,
                        help='Override the MIME type guessed from the file extension')
    parser.add_argument('--log-level', default=None,
                        help='Emit JSON logs at this level (DEBUG, INFO, ...)')
    args = parser.parse_args(argv)

    if args.log_level:
        configure_logging('imgdrop-client', args.log_level)

    try:
        file = SelectedFile.from_path(args.path, content_type=args.content_type)
    except OSError as e:
        print(f"ERROR: cannot read {args.path}: {e}", file=sys.stderr)
        return 1

    read_url = asyncio.run(upload_file(file, args.server))
    if read_url is None:
        return 1

    print(read_url)
    return 0


if __name__ == '__main__':
    sys.exit(main())
