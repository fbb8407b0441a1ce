import mock

from kestrel.exceptions import DeliveryError, RateLimited
from kestrel.retry import RetryPolicy
from kestrel.transport import DeliveryOutcome
from kestrel.utils.testutils import TestCase

OK = DeliveryOutcome(success=True, status_code=200)
FAILED = DeliveryOutcome(
    success=False, status_code=500, error=DeliveryError('boom', 500))


class RetryPolicyTest(TestCase):
    def setUp(self):
        self.sleep = mock.Mock()
        self.policy = RetryPolicy(max_attempts=3, sleep=self.sleep)

    def test_rejects_zero_attempts(self):
        self.assertRaises(ValueError, RetryPolicy, max_attempts=0)

    def test_success_first_time(self):
        func = mock.Mock(return_value=OK)
        assert self.policy.call(func, 'hi') is OK
        assert func.call_count == 1
        assert not self.sleep.called

    def test_retries_until_success(self):
        func = mock.Mock(side_effect=[FAILED, FAILED, OK])
        assert self.policy.call(func, 'hi') is OK
        assert func.call_count == 3
        assert self.sleep.call_count == 2

    def test_gives_up(self):
        func = mock.Mock(return_value=FAILED)
        assert self.policy.call(func, 'hi') is FAILED
        assert func.call_count == 3
        assert self.sleep.call_count == 2

    def test_reuses_event_id(self):
        func = mock.Mock(side_effect=[FAILED, OK])
        self.policy.call(func, 'hi', level='error')
        first, second = func.call_args_list
        assert first[1]['event_id'] == second[1]['event_id']
        assert len(first[1]['event_id']) == 32
        assert first[1]['level'] == 'error'

    def test_keeps_given_event_id(self):
        func = mock.Mock(return_value=OK)
        self.policy.call(func, event_id='abc')
        assert func.call_args[1]['event_id'] == 'abc'

    def test_rate_limited_is_not_retried(self):
        limited = DeliveryOutcome(
            success=False, status_code=429, retry_after=30,
            rate_limited=True, error=RateLimited('slow down', 30))
        func = mock.Mock(return_value=limited)
        assert self.policy.call(func) is limited
        assert func.call_count == 1

    def test_detached_is_not_retried(self):
        func = mock.Mock(return_value=None)
        assert self.policy.call(func) is None
        assert func.call_count == 1

    def test_backoff_delay(self):
        policy = RetryPolicy(base_delay=0.1, max_delay=2.0)
        with mock.patch('random.uniform', return_value=1.0):
            assert policy.backoff_delay(0) == 0.1
            assert policy.backoff_delay(2) == 0.4
            assert policy.backoff_delay(10) == 2.0

    def test_backoff_jitter_bounds(self):
        policy = RetryPolicy(base_delay=1, max_delay=10)
        for _ in range(50):
            assert 0.8 <= policy.backoff_delay(0) <= 1.2
