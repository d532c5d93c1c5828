import pytest
import redis
from unittest.mock import patch, MagicMock

from dedup_index import retry


@patch("time.sleep", return_value=None)  # skip real sleeping
def test_successful_operation(mock_sleep):
    """Should return immediately when operation succeeds."""
    op = MagicMock(return_value=True)

    result = retry.with_backoff(op)

    assert result is True
    op.assert_called_once()
    mock_sleep.assert_not_called()


@patch("time.sleep", return_value=None)
def test_eventual_success(mock_sleep):
    """Should retry transient connection errors until the operation succeeds."""
    op = MagicMock(side_effect=[redis.ConnectionError("down"), redis.TimeoutError("slow"), "ok"])

    result = retry.with_backoff(op, max_retries=5)

    assert result == "ok"
    assert op.call_count == 3
    assert mock_sleep.call_count == 2  # sleeps after first two failures


@patch("time.sleep", return_value=None)
def test_all_failures(mock_sleep):
    """Should raise after max_retries are exhausted."""
    op = MagicMock(side_effect=redis.ConnectionError("down"))

    with pytest.raises(redis.ConnectionError):
        retry.with_backoff(op, max_retries=3)

    assert op.call_count == 3
    assert mock_sleep.call_count == 2  # sleeps between retries


@patch("time.sleep", return_value=None)
def test_non_transient_errors_not_retried(mock_sleep):
    """Configuration and script errors surface on the first attempt."""
    op = MagicMock(side_effect=ValueError("offset out of range"))

    with pytest.raises(ValueError):
        retry.with_backoff(op, max_retries=5)

    op.assert_called_once()
    mock_sleep.assert_not_called()


@patch("time.sleep", return_value=None)
def test_max_delay_cap(mock_sleep):
    """Ensure delay never exceeds max_delay."""
    with patch("random.uniform", return_value=1.0):  # remove jitter randomness
        op = MagicMock(side_effect=[redis.ConnectionError("x")] * 4)

        with pytest.raises(redis.ConnectionError):
            retry.with_backoff(op, max_retries=4, base_delay=10, max_delay=15)

        # Extract delays passed to time.sleep
        delays = [args[0] for args, _ in mock_sleep.call_args_list]
        assert all(d <= 15 for d in delays)


def test_zero_retries_rejected():
    with pytest.raises(ValueError):
        retry.with_backoff(MagicMock(), max_retries=0)
