"""Audio input collaborators.

:class:`SoundDeviceSource` opens the microphone through PortAudio and
:class:`SyntheticSource` generates a test tone; both hand raw blocks to the
running session's processor and report acquisition failures as
:class:`~acousticdiag.core.errors.DeviceUnavailable`.
"""

from .sources import AudioHandle, AudioSource, SoundDeviceSource, SyntheticSource

__all__ = ["AudioHandle", "AudioSource", "SoundDeviceSource", "SyntheticSource"]
