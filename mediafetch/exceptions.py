# mediafetch/exceptions.py
"""Error kinds surfaced by the download service.

Every error carries the HTTP status it maps to and a short public message.
Diagnostic detail goes to the log, never to the client.
"""


class MediaFetchError(Exception):
    status_code = 500
    message = "Internal error."

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.message)
        self.detail = detail


class InvalidInput(MediaFetchError):
    status_code = 400
    message = "Invalid request."


class MissingFields(InvalidInput):
    message = "URL and format are required"


class InvalidFormat(InvalidInput):
    message = "Unsupported format"


class JobAlreadyRunning(MediaFetchError):
    status_code = 409
    message = "A download is already in progress"


class ExecutionFailure(MediaFetchError):
    message = "Download failed."


class DownloadCancelled(ExecutionFailure):
    message = "Download canceled."


class SaveFailure(MediaFetchError):
    message = "Error saving file."


class DirectoryReadFailure(MediaFetchError):
    message = "Could not read download directory."
