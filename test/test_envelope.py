"""
Invocation envelope tests (ordering, condition gate, failure propagation).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from gantry import Argument, Listener, bind, command, invoke, listener
from gantry.faults import ConditionRejectedError, InvalidValueError, StopExecution
from gantry.converters import INTEGER


class Recorder(Listener):

    def __init__(self, name, journal):
        self.name = name
        self.journal = journal

    def before_call(self, command, params, /):
        self.journal.append(self.name + ".before")

    def after_call(self, command, params, result, /):
        self.journal.append(self.name + ".after")

    def after_throw(self, command, params, exception, /):
        self.journal.append(self.name + ".afterThrow")


class TestOrdering(TestCase):

    def setUp(self):
        self.journal = []
        self.listeners = [Recorder("L1", self.journal), Recorder("L2", self.journal)]

    def testSuccessOrder(self):
        def action(params):
            self.journal.append("action")
            return 0

        run = command("run", action=action, listeners=self.listeners)
        self.assertEqual(invoke(run, bind(run, [])), 0)
        self.assertEqual(self.journal, ["L1.before", "L2.before", "action", "L1.after", "L2.after"])

    def testFailureOrderAndRethrow(self):
        failure = RuntimeError("boom")

        def action(params):
            self.journal.append("action")
            raise failure

        run = command("run", action=action, listeners=self.listeners)
        with self.assertRaises(RuntimeError) as context:
            invoke(run, bind(run, []))
        self.assertIs(context.exception, failure)
        self.assertEqual(self.journal, ["L1.before", "L2.before", "action", "L1.afterThrow", "L2.afterThrow"])

    def testAfterCallReceivesResult(self):
        results = []
        run = command("run", action=lambda params: 5, listeners=[
            listener(after=lambda command, params, result: results.append(result)),
        ])
        self.assertEqual(run.invoke([]), 5)
        self.assertEqual(results, [5])

    def testAfterThrowReceivesException(self):
        seen = []
        count = Argument("count", converter=INTEGER)

        def action(params):
            return count(params)

        run = command("run", parts=[count], action=action, listeners=[
            listener(after_throw=lambda command, params, exception: seen.append(exception)),
        ])
        with self.assertRaises(InvalidValueError):
            run.invoke(["NaN"])
        self.assertIsInstance(seen[0], InvalidValueError)

    def testDuckTypedListener(self):
        journal = self.journal

        class BeforeOnly:
            def before_call(self, command, params):
                journal.append("before")

        run = command("run", action=lambda params: 0, listeners=[BeforeOnly()])
        run.invoke([])
        self.assertEqual(journal, ["before"])

    def testBeforeFailureSkipsAction(self):
        ran = []

        def before(command, params):
            raise PermissionError("nope")

        run = command("run", action=lambda params: ran.append(1), listeners=[listener(before=before)])
        with self.assertRaises(PermissionError):
            run.invoke([])
        self.assertEqual(ran, [])


class TestStatus(TestCase):

    def testNoneMapsToOne(self):
        run = command("run", action=lambda params: None)
        self.assertEqual(run.invoke([]), 1)

    def testNonIntegerResultRejected(self):
        seen = []
        run = command("run", action=lambda params: "ok", listeners=[
            listener(after_throw=lambda command, params, exception: seen.append(type(exception))),
        ])
        with self.assertRaises(TypeError):
            run.invoke([])
        self.assertEqual(seen, [TypeError])

    def testBooleanResultRejected(self):
        run = command("run", action=lambda params: True)
        with self.assertRaises(TypeError):
            run.invoke([])

    def testStopExecutionPropagates(self):
        def action(params):
            raise StopExecution("Nothing to cut")

        run = command("run", action=action)
        with self.assertRaises(StopExecution) as context:
            run.invoke([])
        self.assertEqual(str(context.exception), "Nothing to cut")

    def testForeignParametersRejected(self):
        one = command("one", action=lambda params: 0)
        two = command("two", action=lambda params: 0)
        with self.assertRaises(ValueError):
            invoke(one, bind(two, []))


class TestCondition(TestCase):

    def testFalseConditionShortCircuits(self):
        journal = []
        run = command(
            "run",
            action=lambda params: journal.append("action"),
            condition=lambda params: False,
            listeners=[Recorder("L1", journal)],
        )
        with self.assertRaises(ConditionRejectedError) as context:
            run.invoke([])
        self.assertEqual(journal, [])
        self.assertIs(context.exception.command, run)

    def testConditionSeesParameters(self):
        force = Argument("force")
        run = command(
            "run",
            parts=[force],
            action=lambda params: 0,
            condition=lambda params: force(params) == "yes",
        )
        self.assertEqual(run.invoke(["yes"]), 0)
        with self.assertRaises(ConditionRejectedError):
            run.invoke(["no"])


if __name__ == "__main__":
    unittest.main()
