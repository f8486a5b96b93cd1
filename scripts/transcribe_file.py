import argparse
import logging
import mimetypes
import os
import sys

# Add project root to path so we can import app
sys.path.append(os.getcwd())

from app.client import RecognitionClient, RecognitionClientError
from app.config.settings import settings


def main() -> int:
    parser = argparse.ArgumentParser(description="Upload a recording and wait for its transcript.")
    parser.add_argument("file", help="Path to an audio file (m4a, mp3, wav, aac)")
    parser.add_argument(
        "--base-url",
        default=f"http://localhost:{settings.port}",
        help="Base URL of the running backend",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")

    if not os.path.exists(args.file):
        print(f"File '{args.file}' not found.")
        return 1

    content_type = mimetypes.guess_type(args.file)[0] or "application/octet-stream"
    client = RecognitionClient.from_settings(args.base_url, settings.client_polling)

    def report(progress):
        print(f"Polling... status={progress['status']} attempt={progress['attempts']}")

    try:
        transcript = client.transcribe(
            args.file,
            filename=os.path.basename(args.file),
            content_type=content_type,
            on_progress=report,
        )
    except RecognitionClientError as e:
        print(f"\nRecognition Error: {e}")
        return 1

    print("\n--- Transcript Result ---")
    print(transcript)
    print("-------------------------")
    return 0


if __name__ == "__main__":
    sys.exit(main())
