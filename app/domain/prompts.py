from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
import re

import yaml

DEFAULT_PROMPT_SPEC_PATH = Path(__file__).resolve().parents[1] / "eval" / "prompts" / "enrichment.v1.yaml"
PLACEHOLDER_RE = re.compile(r"\{\{\s*([a-zA-Z0-9_.-]+)\s*\}\}")


@dataclass(frozen=True)
class PromptConfig:
    template: str
    max_output_tokens: int


@dataclass(frozen=True)
class EnrichmentPromptSpec:
    spec_version: str
    model: str
    temperature: float
    region: str
    summary: PromptConfig
    alternative: PromptConfig


def load_prompt_spec(*, file_path: str | Path = DEFAULT_PROMPT_SPEC_PATH) -> EnrichmentPromptSpec:
    data = yaml.safe_load(Path(file_path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("prompt spec must be a YAML object")
    return parse_prompt_spec(data)


def parse_prompt_spec(data: dict[str, object]) -> EnrichmentPromptSpec:
    prompts_raw = _required_obj(data, "prompts")
    return EnrichmentPromptSpec(
        spec_version=_required_str(data, "spec_version"),
        model=_required_str(data, "model"),
        temperature=_required_float(data, "temperature"),
        region=_required_str(data, "region"),
        summary=_prompt_config(_required_obj(prompts_raw, "summary"), "prompts.summary"),
        alternative=_prompt_config(_required_obj(prompts_raw, "alternative"), "prompts.alternative"),
    )


def render_prompt(*, template: str, inputs: dict[str, object]) -> str:
    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in inputs:
            raise ValueError(f"missing placeholder value: {key}")
        value = inputs[key]
        if isinstance(value, (dict, list, tuple)):
            return json.dumps(value, ensure_ascii=False)
        return str(value)

    return PLACEHOLDER_RE.sub(_replace, template)


def summary_prompt(spec: EnrichmentPromptSpec, *, products: list[str]) -> str:
    return render_prompt(template=spec.summary.template, inputs={"products": products, "region": spec.region})


def alternative_prompt(spec: EnrichmentPromptSpec, *, product: str) -> str:
    return render_prompt(template=spec.alternative.template, inputs={"product": product, "region": spec.region})


def _prompt_config(data: dict[str, object], field_name: str) -> PromptConfig:
    template = _required_str(data, "template")
    max_output_tokens = data.get("max_output_tokens")
    if not isinstance(max_output_tokens, int) or max_output_tokens <= 0:
        raise ValueError(f"{field_name}.max_output_tokens must be a positive integer")
    return PromptConfig(template=template.strip(), max_output_tokens=max_output_tokens)


def _required_str(data: dict[str, object], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{key} is required and must be non-empty string")
    return value


def _required_float(data: dict[str, object], key: str) -> float:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} is required and must be number")
    return float(value)


def _required_obj(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise ValueError(f"{key} is required and must be object")
    return value
