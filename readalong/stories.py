"""Built-in stories offered on the story list."""

from __future__ import annotations

from typing import Any

STORIES: dict[str, dict[str, str]] = {
    "1": {
        "title": "O Gato de Botas",
        "emoji": "🐱",
        "text": (
            "Era uma vez um gato muito esperto. Ele usava botas grandes e um "
            "chapéu bonito. O gato ajudou seu dono a ficar rico."
        ),
    },
    "2": {
        "title": "A Tartaruga e a Lebre",
        "emoji": "🐢",
        "text": (
            "Era uma vez uma tartaruga muito sábia. Um dia, uma lebre veloz "
            "passou por ela. A tartaruga venceu a corrida."
        ),
    },
    "3": {
        "title": "João e o Pé de Feijão",
        "emoji": "🌱",
        "text": (
            "João plantou um feijão mágico. O feijão cresceu até as nuvens. "
            "Lá em cima havia um gigante e muito ouro."
        ),
    },
    "4": {
        "title": "A Pequena Sereia",
        "emoji": "🧜‍♀️",
        "text": (
            "Uma sereia vivia no fundo do mar. Ela sonhava em conhecer a "
            "terra. Um dia ela nadou para a superfície."
        ),
    },
    "5": {
        "title": "O Patinho Feio",
        "emoji": "🦢",
        "text": (
            "Um patinho era diferente dos irmãos. Todos riam dele por ser "
            "feio. Mas ele cresceu e virou um lindo cisne."
        ),
    },
}


def get_story(story_id: str) -> dict[str, Any] | None:
    story = STORIES.get(str(story_id))
    if story is None:
        return None
    return {"id": str(story_id), **story, "word_count": len(story["text"].split())}


def list_stories() -> list[dict[str, Any]]:
    """Story summaries (no text), in catalog order."""
    return [
        {
            "id": story_id,
            "title": story["title"],
            "emoji": story["emoji"],
            "word_count": len(story["text"].split()),
        }
        for story_id, story in STORIES.items()
    ]
