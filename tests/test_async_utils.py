import pytest

from provisioner.app.utils.async_utils import async_retry


class Flaky(Exception):
    retryable = True


class Fatal(Exception):
    retryable = False


def retryable(e):
    return getattr(e, "retryable", False)


@pytest.mark.asyncio
async def test_retries_until_success():
    attempts = []

    @async_retry(max_retries=3, delay=0, retry_if=retryable)
    async def op():
        attempts.append(1)
        if len(attempts) < 3:
            raise Flaky("try again")
        return "ok"

    assert await op() == "ok"
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_non_retryable_raised_immediately():
    attempts = []

    @async_retry(max_retries=3, delay=0, retry_if=retryable)
    async def op():
        attempts.append(1)
        raise Fatal("no")

    with pytest.raises(Fatal):
        await op()
    assert len(attempts) == 1


@pytest.mark.asyncio
async def test_last_error_raised_when_exhausted():
    attempts = []

    @async_retry(max_retries=2, delay=0)
    async def op():
        attempts.append(1)
        raise Flaky(f"attempt {len(attempts)}")

    with pytest.raises(Flaky, match="attempt 3"):
        await op()
    assert len(attempts) == 3
