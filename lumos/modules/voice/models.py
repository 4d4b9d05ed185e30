# Voice has no tables of its own
# A voice connection writes to sessions and session_analytics (see conversations/models.py)
# and the tutor turns it produces land in messages

"""
Per-connection state held in memory only:

VoiceConnection:
- connection_id: str - sessionId sent back in session_initialized
- user_id: str (nullable) - set when init_session carries a valid token or userId
- db_session_id: str (nullable) - sessions.id created for the connection
- started_at: float - monotonic time at init, used for duration_sec analytics
- last_activity: float - monotonic time of the last message, used by the idle sweep

Audio arrives base64 encoded (webm/opus from MediaRecorder) and is buffered
until the next process_audio message asks for a transcript.
"""
