from __future__ import annotations

import argparse
from pathlib import Path

# faster-whisper loads CTranslate2 conversions; the transformers pipeline
# needs the original PyTorch/safetensors checkpoint. They are not interchangeable.
SNAPSHOTS = {
    "faster_whisper": {
        "repo_id": "Systran/faster-whisper-base.en",
        "allow": ["config.json", "preprocessor_config.json", "tokenizer.json", "vocabulary.*", "model.bin"],
    },
    "hf": {
        "repo_id": "openai/whisper-base.en",
        "allow": [
            "config.json",
            "generation_config.json",
            "preprocessor_config.json",
            "tokenizer.json",
            "tokenizer_config.json",
            "special_tokens_map.json",
            "added_tokens.json",
            "normalizer.json",
            "vocab.json",
            "merges.txt",
            "model.safetensors",
        ],
    },
}


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Download a Whisper checkpoint from HuggingFace for one wavscribe backend."
    )
    parser.add_argument(
        "--backend",
        choices=sorted(SNAPSHOTS),
        default="faster_whisper",
        help="Backend the snapshot is for; picks the default repo and file set (default: faster_whisper)",
    )
    parser.add_argument(
        "--repo-id",
        default="",
        help="Override the repo id. It must hold a checkpoint in the chosen backend's format.",
    )
    parser.add_argument(
        "--out-dir",
        default="",
        help="Destination directory (default: models/whisper-base.en for faster_whisper, "
        "models/hf-whisper-base.en for hf)",
    )
    parser.add_argument("--revision", default="", help="Optional git revision / tag / commit SHA.")

    args = parser.parse_args()
    snapshot = SNAPSHOTS[args.backend]
    repo_id = str(args.repo_id or snapshot["repo_id"])
    default_dir = "models/whisper-base.en" if args.backend == "faster_whisper" else "models/hf-whisper-base.en"
    out_dir = Path(args.out_dir or default_dir).expanduser().resolve()
    out_dir.mkdir(parents=True, exist_ok=True)

    try:
        from huggingface_hub import snapshot_download  # type: ignore
    except Exception as exc:
        raise SystemExit("huggingface_hub is required. Install ML deps: pip install -e .[ml]") from exc

    snapshot_download(
        repo_id=repo_id,
        repo_type="model",
        revision=str(args.revision) if args.revision else None,
        local_dir=out_dir.as_posix(),
        allow_patterns=list(snapshot["allow"]),
    )

    print(f"Downloaded {repo_id} to: {out_dir}")
    print(
        f"Next: set `engine.backend: {args.backend}` and `engine.model_path: {out_dir.as_posix()}` in config.yaml "
        f"(this snapshot only loads with the {args.backend} backend)."
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
