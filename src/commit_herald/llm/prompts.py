import yaml
from pathlib import Path

PROMPTS_DIR = Path(__file__).parent / "prompts"

def load_prompt(name: str) -> str:
    # Prioritize .yaml for structured prompts
    yaml_path = PROMPTS_DIR / f"{name}.yaml"
    if yaml_path.exists():
        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f)
            return data.get("content", "")

    # Fallback to .md
    md_path = PROMPTS_DIR / f"{name}.md"
    if md_path.exists():
        with open(md_path, "r") as f:
            return f.read()

    raise FileNotFoundError(f"Prompt {name} not found as .yaml or .md")

def render_prompt(name: str, **values) -> str:
    return load_prompt(name).format(**values)
