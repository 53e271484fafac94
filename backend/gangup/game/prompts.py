from __future__ import annotations

import random


FALLBACK_PROMPT = "{A} vs {B}"

DEFAULT_PROMPTS = [
    "Who would survive longer in a zombie apocalypse: {A} or {B}?",
    "Who is more likely to get lost on the way to their own party: {A} or {B}?",
    "Who would win a karaoke battle: {A} or {B}?",
    "Who would you trust to plan the group holiday: {A} or {B}?",
    "Who is secretly the better cook: {A} or {B}?",
    "Who would talk their way out of a parking ticket: {A} or {B}?",
    "Who would last longer without their phone: {A} or {B}?",
    "Who is more likely to become famous: {A} or {B}?",
    "Who would you want next to you in an escape room: {A} or {B}?",
    "Who tells the better story at 2am: {A} or {B}?",
    "Who would win a staring contest: {A} or {B}?",
    "Who is more likely to adopt five cats: {A} or {B}?",
]


def pick_prompt(prompts: list[str] | None = None, rng: random.Random | None = None) -> str:
    pool = prompts if prompts is not None else DEFAULT_PROMPTS
    if not pool:
        return FALLBACK_PROMPT
    return (rng or random).choice(pool)


def render_prompt(template: str, name_a: str, name_b: str) -> str:
    return (template or FALLBACK_PROMPT).replace("{A}", name_a).replace("{B}", name_b)
