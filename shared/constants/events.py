class EventNames:
    """Event names emitted by the browser SDK."""

    REQUEST = "request"
    PAGE_VIEW = "page-view"
    PERFORMANCE_PAINT = "performance-paint"
    PERFORMANCE_RESOURCE = "performance-resource"
    PERFORMANCE_LISTENING = "performance-listening"
