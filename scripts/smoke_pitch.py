#!/usr/bin/env python3
import argparse
import mimetypes
import sys
from pathlib import Path

import httpx


def _guess_media_type(path: Path, fallback: str) -> str:
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or fallback


def run_transcribe(client: httpx.Client, api_base: str, audio_path: Path) -> str:
    with audio_path.open("rb") as audio_file:
        files = {"file": (audio_path.name, audio_file, _guess_media_type(audio_path, "audio/webm"))}
        response = client.post(f"{api_base}/api/transcribe", files=files)
    if response.status_code >= 400:
        raise RuntimeError(f"Transcription failed ({response.status_code}): {response.text}")
    return response.json().get("text", "")


def run_pitch(client: httpx.Client, api_base: str, fields: dict, resume_path: Path | None) -> None:
    files = None
    resume_file = None
    if resume_path is not None:
        resume_file = resume_path.open("rb")
        media_type = _guess_media_type(resume_path, "application/octet-stream")
        files = {"resumeFile": (resume_path.name, resume_file, media_type)}

    try:
        with client.stream("POST", f"{api_base}/api/pitch", data=fields, files=files) as response:
            if response.status_code >= 400:
                response.read()
                raise RuntimeError(f"Pitch request failed ({response.status_code}): {response.text}")
            if response.headers.get("content-type", "").startswith("application/json"):
                response.read()
                print(response.json().get("pitch", ""))
                return
            for text in response.iter_text():
                sys.stdout.write(text)
                sys.stdout.flush()
            print()
    finally:
        if resume_file is not None:
            resume_file.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke test for a running pitch backend.")
    parser.add_argument("--api-base", default="http://127.0.0.1:8000", help="Backend base URL.")
    parser.add_argument("--job-title", default="Product Manager")
    parser.add_argument("--purpose", default="Job interview")
    parser.add_argument("--tone", default="Professional")
    parser.add_argument("--length", default="")
    parser.add_argument("--resume", help="Optional PDF or DOCX resume to upload.")
    parser.add_argument("--audio", help="Record-style audio file; switches to voice mode.")
    parser.add_argument("--timeout-seconds", type=float, default=90.0)
    args = parser.parse_args()

    with httpx.Client(timeout=args.timeout_seconds, trust_env=False) as client:
        if args.audio:
            audio_path = Path(args.audio).expanduser().resolve()
            if not audio_path.exists():
                raise FileNotFoundError(f"Audio file not found: {audio_path}")
            transcript = run_transcribe(client, args.api_base, audio_path)
            print(f"transcript: {transcript}")
            fields = {
                "inputMode": "voice",
                "voiceTranscription": transcript,
                "tone": args.tone,
                "length": args.length,
            }
            run_pitch(client, args.api_base, fields, None)
            return

        resume_path = Path(args.resume).expanduser().resolve() if args.resume else None
        if resume_path is not None and not resume_path.exists():
            raise FileNotFoundError(f"Resume file not found: {resume_path}")
        fields = {
            "inputMode": "form",
            "jobTitle": args.job_title,
            "purpose": args.purpose,
            "tone": args.tone,
            "length": args.length,
        }
        run_pitch(client, args.api_base, fields, resume_path)


if __name__ == "__main__":
    main()
