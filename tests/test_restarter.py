import unittest

import docker.errors

from errors import StartError, StopError
from restarter import Restarter

from fakes import REF, FakeGateway


class TestRestarter(unittest.TestCase):
    def make(self, gateway, settle_delay=10.0):
        sleeps = []

        def sleep(seconds):
            gateway.calls.append(('sleep', seconds))
            sleeps.append(seconds)

        return Restarter(gateway, settle_delay=settle_delay, sleep=sleep), sleeps

    def test_stop_settle_start_in_order(self):
        gw = FakeGateway()
        restarter, sleeps = self.make(gw)
        outcome = restarter.restart(REF)
        self.assertEqual(gw.call_names(), ['stop', 'sleep', 'start'])
        self.assertEqual(sleeps, [10.0])
        self.assertTrue(outcome.ok)
        self.assertIsNone(outcome.error)

    def test_back_to_back_restarts_keep_order(self):
        gw = FakeGateway()
        restarter, _ = self.make(gw, settle_delay=0)
        for _ in range(5):
            restarter.restart(REF)
        self.assertEqual(gw.call_names(), ['stop', 'sleep', 'start'] * 5)

    def test_stop_failure_never_starts(self):
        gw = FakeGateway(stop_error=docker.errors.APIError("cannot stop"))
        restarter, sleeps = self.make(gw)
        with self.assertLogs('restarter', level='ERROR'):
            outcome = restarter.restart(REF)
        self.assertEqual(gw.call_names(), ['stop'])
        self.assertEqual(sleeps, [])
        self.assertFalse(outcome.stopped)
        self.assertFalse(outcome.ok)
        self.assertIsInstance(outcome.error, StopError)

    def test_start_failure_is_logged(self):
        gw = FakeGateway(start_error=docker.errors.APIError("port is already allocated"))
        restarter, _ = self.make(gw)
        with self.assertLogs('restarter', level='ERROR') as logs:
            outcome = restarter.restart(REF)
        self.assertEqual(gw.call_names(), ['stop', 'sleep', 'start'])
        self.assertTrue(outcome.stopped)
        self.assertFalse(outcome.started)
        self.assertIsInstance(outcome.error, StartError)
        self.assertIn(REF.id, logs.output[0])

    def test_success_is_logged(self):
        restarter, _ = self.make(FakeGateway())
        with self.assertLogs('restarter', level='INFO') as logs:
            restarter.restart(REF)
        self.assertIn('restarted successfully', logs.output[-1])

    def test_stop_timeout_passed_through(self):
        gw = FakeGateway()
        seen = []
        gw.stop = lambda container_id, timeout=None: seen.append(timeout)
        Restarter(gw, settle_delay=0, stop_timeout=3, sleep=lambda s: None).restart(REF)
        self.assertEqual(seen, [3])

    def test_negative_settle_delay_rejected(self):
        with self.assertRaises(ValueError):
            Restarter(FakeGateway(), settle_delay=-1)

    def test_non_finite_settle_delay_rejected_before_any_stop(self):
        for value in (float('nan'), float('inf'), 1e308):
            with self.subTest(settle_delay=value):
                gw = FakeGateway()
                with self.assertRaises(ValueError):
                    Restarter(gw, settle_delay=value)
                self.assertEqual(gw.calls, [])


if __name__ == '__main__':
    unittest.main()
