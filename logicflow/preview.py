"""Flat top-down preview of a SceneGraph in a pygame window."""

from typing import Tuple

import pygame

from logicflow.runtime.scene import SceneGraph, SceneNode

BACKGROUND = (245, 245, 247)


def parse_color(color_value: str) -> Tuple[int, int, int]:
    """Parse '#rrggbb' or a color name; unknown values render white."""
    try:
        color = pygame.Color(color_value)
    except (ValueError, TypeError):
        return (255, 255, 255)
    return (color.r, color.g, color.b)


class ScenePreview:
    """Draws each shown node as a rectangle, farthest first."""

    def __init__(self, scene: SceneGraph):
        self.scene = scene

    def _node_rect(self, node: SceneNode) -> pygame.Rect:
        width, height = self.scene.config.viewport
        ppu = self.scene.config.pixels_per_unit
        x, y, _ = node.world_position()
        w = abs(node.scale.x) * node.size * ppu
        h = abs(node.scale.y) * node.size * ppu
        cx = width / 2 + x * ppu
        cy = height / 2 - y * ppu
        return pygame.Rect(int(cx - w / 2), int(cy - h / 2), max(1, int(w)), max(1, int(h)))

    def render(self, screen: pygame.Surface) -> None:
        screen.fill(BACKGROUND)
        nodes = []
        for object_id in self.scene.object_ids():
            root = self.scene.get_object_mesh(object_id)
            nodes.extend(n for n in root.traverse() if n.is_shown())
        nodes.sort(key=lambda n: n.world_position()[2])

        for node in nodes:
            color = parse_color(node.material.color) if node.material else (200, 200, 200)
            rect = self._node_rect(node)
            if node.material is not None and node.material.opacity < 1.0:
                overlay = pygame.Surface(rect.size, pygame.SRCALPHA)
                overlay.fill((*color, int(255 * node.material.opacity)))
                screen.blit(overlay, rect.topleft)
            else:
                pygame.draw.rect(screen, color, rect)
