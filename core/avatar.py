"""Sprite-sheet talking avatar animation."""

import asyncio
import logging
import time

from .config import DEFAULT_AVATAR, MIN_FRAME_MS, DEFAULT_FRAME_MS, DEFAULT_FRAME_SIZE

logger = logging.getLogger(__name__)

TALK = 'talk'
IDLE = 'idle'
HIDDEN = 'hide'


def _number(value, default):
    try:
        return float(value) if value not in (None, '') else default
    except (TypeError, ValueError):
        return default


def normalize_sprite_config(raw: dict) -> dict:
    """Fill in defaults and clamp a talk-animation.json config."""
    raw = raw or {}
    image_info = raw.get('imageInfo') or {}
    frame_dims = image_info.get('frameDimensions') or {}
    horizontal = max(1, int(_number(raw.get('horizontalFrames'), 1) or 1))
    vertical = max(1, int(_number(raw.get('verticalFrames'), 1) or 1))
    return {
        'borderTop': _number(raw.get('borderTop'), 0),
        'borderRight': _number(raw.get('borderRight'), 0),
        'borderBottom': _number(raw.get('borderBottom'), 0),
        'borderLeft': _number(raw.get('borderLeft'), 0),
        'horizontalFrames': horizontal,
        'verticalFrames': vertical,
        'animationSpeed': max(MIN_FRAME_MS, _number(raw.get('animationSpeed'), DEFAULT_FRAME_MS) or DEFAULT_FRAME_MS),
        'loop': raw.get('loop') is not False,
        'imageInfo': {
            'width': image_info.get('width') or None,
            'height': image_info.get('height') or None,
            'frameDimensions': {
                'width': _number(frame_dims.get('width'), DEFAULT_FRAME_SIZE) or DEFAULT_FRAME_SIZE,
                'height': _number(frame_dims.get('height'), DEFAULT_FRAME_SIZE) or DEFAULT_FRAME_SIZE,
            },
        },
        'totalFrames': max(1, int(_number(raw.get('totalFrames'), horizontal * vertical) or horizontal * vertical)),
    }


def frame_offset(config: dict, frame: int) -> tuple[float, float]:
    """Pixel offset of a frame inside the sprite sheet."""
    cols = config['horizontalFrames']
    col = frame % cols
    row = frame // cols
    dims = config['imageInfo']['frameDimensions']
    x = config['borderLeft'] + col * dims['width']
    y = config['borderTop'] + row * dims['height']
    return (x, y)


class TalkingAvatar:
    """Avatar that animates while speaking and rests on its first frame when idle.

    Frames advance on accumulated elapsed time, so the cadence stays stable no
    matter how often tick() is called. Observers are called with (state, avatar)
    on every state or frame change.
    """

    def __init__(self, config_loader, observers: list = None):
        self.config_loader = config_loader
        self.observers = observers or []
        self._config_cache = {}
        self.name = None
        self.config = None
        self.frame = 0
        self.state = HIDDEN
        self.is_animating = False
        self._accum = 0.0

    def load_config(self, name: str) -> dict:
        if name not in self._config_cache:
            self._config_cache[name] = normalize_sprite_config(self.config_loader(name))
        return self._config_cache[name]

    def _setup(self, name: str) -> None:
        self.config = self.load_config(name)
        self.name = name
        self.frame = 0

    def start_talk(self, name: str = DEFAULT_AVATAR) -> None:
        if self.is_animating and self.name == name:
            return
        self._stop()
        try:
            self._setup(name)
        except Exception as e:
            logger.error(f"start_talk error for avatar '{name}': {e}")
            return
        self.is_animating = True
        self.state = TALK
        self._notify()

    def set_idle(self, name: str = DEFAULT_AVATAR) -> None:
        self._stop()
        try:
            if self.name != name or self.config is None:
                self._setup(name)
        except Exception as e:
            logger.error(f"set_idle error for avatar '{name}': {e}")
            return
        self.frame = 0
        self.state = IDLE
        self._notify()

    def hide(self) -> None:
        self._stop()
        self.state = HIDDEN
        self._notify()

    def dispose(self) -> None:
        self._stop()
        self._config_cache.clear()
        self.name = None
        self.config = None
        self.frame = 0
        self.state = HIDDEN

    def tick(self, delta_ms: float) -> None:
        """Advance the animation by elapsed milliseconds."""
        if not self.is_animating:
            return
        speed = self.config['animationSpeed']
        total = self.config['totalFrames']
        loop = self.config['loop']
        self._accum += delta_ms
        previous = self.frame
        while self._accum >= speed:
            self._accum -= speed
            if not loop and self.frame >= total - 1:
                break
            self.frame = (self.frame + 1) % total
        if not loop and self.frame == total - 1:
            self._stop()
        if self.frame != previous:
            self._notify()

    def offset(self) -> tuple[float, float] | None:
        if self.config is None:
            return None
        return frame_offset(self.config, self.frame)

    async def animate(self, clock=time.monotonic) -> None:
        """Drive tick() from a clock until the animation stops."""
        last = clock()
        while self.is_animating:
            await asyncio.sleep(self.config['animationSpeed'] / 1000)
            now = clock()
            self.tick((now - last) * 1000)
            last = now

    def _stop(self) -> None:
        self.is_animating = False
        self._accum = 0.0

    def _notify(self) -> None:
        for observer in self.observers:
            observer(self.state, self)
