import httpx

__all__ = ["TaskDelegate"]


class TaskDelegate:
    """
    Receives life cycle callbacks for a single transfer.

    Every hook is a no-op; subclass and override the ones you need. Set
    ``auth`` to an ``httpx.Auth`` to answer authentication challenges for
    the transfer instead of using the client's default.
    """

    auth: httpx.Auth | None = None

    def did_create_task(self, request: httpx.Request) -> None:
        pass

    def did_receive_response(self, response: httpx.Response) -> None:
        pass

    def did_send_body_data(
        self, bytes_sent: int, total_bytes_sent: int, total_bytes_expected: int | None
    ) -> None:
        pass

    def did_write_data(
        self, bytes_written: int, total_bytes_written: int, total_bytes_expected: int | None
    ) -> None:
        pass

    def did_produce_resume_data(self, resume_data: bytes) -> None:
        """Called with an opaque token when an interrupted download can be resumed."""

    def did_complete(self, request: httpx.Request, error: BaseException | None) -> None:
        pass
