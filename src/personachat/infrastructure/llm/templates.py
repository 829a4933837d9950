"""Jinja2 template utilities for prompt assembly."""

from collections.abc import Sequence

from jinja2 import Environment, PackageLoader, select_autoescape

from personachat.domain.entities import Persona, Turn, latest_user_text


def create_jinja_env() -> Environment:
    """Create Jinja2 environment for prompt templates.

    Loads templates from the personachat.infrastructure.llm ``prompts``
    directory.

    Returns:
        Configured Jinja2 environment.
    """
    return Environment(
        loader=PackageLoader("personachat.infrastructure.llm", "prompts"),
        autoescape=select_autoescape(),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_system_instruction(env: Environment, persona: Persona) -> str:
    """Persona system prompt followed by its background facts."""
    template = env.get_template("system_instruction.j2")
    return template.render(persona=persona)


def render_narrative(env: Environment, turns: Sequence[Turn], persona: Persona) -> str:
    """Flatten the whole conversation into one prompt addressed to the persona.

    Args:
        env: Jinja2 environment.
        turns: Conversation so far, oldest first.
        persona: Persona to answer as.

    Returns:
        Prompt text: system instruction, examples, history and the
        closing request to answer the latest user message.
    """
    template = env.get_template("narrative.j2")
    return template.render(
        system_instruction=render_system_instruction(env, persona),
        persona=persona,
        turns=turns,
        last_user_text=latest_user_text(turns),
    )
