import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "model": "anthropic",
    "model_name": None,  # None = provider default; set to pin a specific model id
    "enable_pr_summary": True,
    "enable_code_review": True,
    "enable_title_generation": True,
    "title_trigger": "@presubmitai",
    "guidelines": None,  # optional path to extra review instructions
    "exclude": [],  # fnmatch patterns or directory names to skip (e.g. "migrations/", "*.min.js")
    "review_draft_prs": False,
}

# GitHub Actions exposes each `with:` input as INPUT_<NAME>.
_ACTION_BOOLEAN_INPUTS = {
    "INPUT_ENABLE_PR_SUMMARY": "enable_pr_summary",
    "INPUT_ENABLE_CODE_REVIEW": "enable_code_review",
    "INPUT_ENABLE_TITLE_GENERATION": "enable_title_generation",
}
_TRUE_VALUES = {"true", "True", "TRUE"}
_FALSE_VALUES = {"false", "False", "FALSE"}


def _parse_action_boolean(name: str, value: str) -> bool:
    # Same accepted spellings as @actions/core getBooleanInput.
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Input {name} does not meet YAML 1.2 core schema boolean: {value!r}")


def _action_inputs() -> dict:
    inputs: dict = {}
    for env_name, key in _ACTION_BOOLEAN_INPUTS.items():
        value = os.environ.get(env_name, "").strip()
        if value:
            inputs[key] = _parse_action_boolean(env_name, value)
    model = os.environ.get("INPUT_MODEL", "").strip()
    if model:
        inputs["model"] = model
    return inputs


def load_config(config_path: str = ".presubmit.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Build the run configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .presubmit.yml in the current directory
      3. GitHub Action inputs (INPUT_* environment variables)
      4. CLI argument overrides

    The returned dict is created once per process and passed explicitly to
    everything that needs it.
    """
    config = {**DEFAULT_CONFIG, "exclude": list(DEFAULT_CONFIG["exclude"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    config.update(_action_inputs())

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

    return config


def load_guidelines(config: dict) -> str:
    """
    Load optional team review guidelines.

    If ``guidelines`` is set in config, loads from that path (relative to cwd).
    Otherwise returns an empty string and the built-in review rules apply alone.
    """
    custom_path = config.get("guidelines")
    if not custom_path:
        return ""
    p = Path(custom_path)
    if not p.exists():
        raise FileNotFoundError(f"Guidelines file not found: {custom_path}")
    return p.read_text()
