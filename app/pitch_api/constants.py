MAX_UPLOAD_BYTES = 25 * 1024 * 1024   # 25 MB (resume documents and voice clips)
MAX_REQUEST_BYTES = 30 * 1024 * 1024  # 30 MB (one upload + form fields)
CHUNK_SIZE = 1024 * 1024

PDF_MEDIA_TYPES = {"application/pdf", "application/x-pdf"}
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

DEFAULT_AUDIO_FILENAME = "recording.webm"
DEFAULT_AUDIO_MEDIA_TYPE = "audio/webm"
