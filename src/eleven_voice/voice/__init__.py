"""Voice client: capture, turn-taking, backend calls and playback."""

from .backend import HttpReplyBackend
from .capture import SpeechCaptureAdapter, partition_results
from .conversation import ConversationLog
from .interfaces import AudioPlayer, RecognitionEngine, RecognitionListener, ReplyBackend
from .playback import SilentAudioPlayer, SubprocessAudioPlayer, find_player_command
from .stt_scripted import ScriptedRecognitionEngine
from .turns import TurnController

__all__ = [
    "AudioPlayer",
    "ConversationLog",
    "HttpReplyBackend",
    "RecognitionEngine",
    "RecognitionListener",
    "ReplyBackend",
    "ScriptedRecognitionEngine",
    "SilentAudioPlayer",
    "SpeechCaptureAdapter",
    "SubprocessAudioPlayer",
    "TurnController",
    "find_player_command",
    "partition_results",
]
