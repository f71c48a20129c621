"""Playback collaborator: the Player protocol and an in-memory queue player.

The headset does the actual audio output; the server keeps the queue and the
play/pause state so gestures can be interpreted against it, and reports every
change through a listener (the application broadcasts it to clients).
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol, Sequence

from ..models import PlaybackState, Track

logger = logging.getLogger("amuse.services.player")

PlaybackListener = Callable[[str, PlaybackState], None]


class Player(Protocol):
    def play(self, track: Track) -> None: ...
    def pause(self) -> None: ...
    def resume(self, track: Track) -> None: ...
    def stop(self) -> None: ...
    def skip_next(self) -> None: ...
    def skip_previous(self) -> None: ...
    def is_playing(self) -> bool: ...
    def current_track(self) -> Track | None: ...


class QueuePlayer:
    """Keeps a track queue, a cursor into it and the playing flag."""

    def __init__(self, listener: PlaybackListener | None = None) -> None:
        self._queue: list[Track] = []
        self._index: int | None = None
        self._playing = False
        self._listener = listener

    # ── Queue ────────────────────────────────────────────────────

    @property
    def queue(self) -> tuple[Track, ...]:
        return tuple(self._queue)

    def load(self, tracks: Sequence[Track], start_index: int = 0) -> None:
        """Replace the queue.  Playback is stopped until ``play`` is called."""
        self._queue = list(tracks)
        if self._queue:
            self._index = max(0, min(start_index, len(self._queue) - 1))
        else:
            self._index = None
        self._playing = False
        self._changed("load")

    # ── Player protocol ──────────────────────────────────────────

    def play(self, track: Track) -> None:
        if track not in self._queue:
            self._queue.append(track)
        self._index = self._queue.index(track)
        self._playing = True
        self._changed("play")

    def pause(self) -> None:
        if not self._playing:
            return
        self._playing = False
        self._changed("pause")

    def resume(self, track: Track) -> None:
        """Continue with *track*; the current track when resuming after a pause."""
        if self.current_track() == track:
            self._playing = True
            self._changed("resume")
        else:
            self.play(track)

    def stop(self) -> None:
        self._playing = False
        self._index = None
        self._changed("stop")

    def skip_next(self) -> None:
        if self._index is None:
            logger.info("skip_next with nothing queued")
            return
        if self._index + 1 >= len(self._queue):
            logger.info("End of queue reached")
            self.stop()
            return
        self._index += 1
        self._playing = True
        self._changed("skip_next")

    def skip_previous(self) -> None:
        if self._index is None:
            logger.info("skip_previous with nothing queued")
            return
        # At the head of the queue, restart the first track.
        self._index = max(0, self._index - 1)
        self._playing = True
        self._changed("skip_previous")

    def is_playing(self) -> bool:
        return self._playing

    def current_track(self) -> Track | None:
        if self._index is None:
            return None
        return self._queue[self._index]

    def state(self) -> PlaybackState:
        return PlaybackState(track=self.current_track(), is_playing=self._playing)

    def _changed(self, action: str) -> None:
        state = self.state()
        track = state.track.title if state.track else "none"
        logger.info("Playback %s (track=%s, playing=%s)", action, track, state.is_playing)
        if self._listener is not None:
            self._listener(action, state)
