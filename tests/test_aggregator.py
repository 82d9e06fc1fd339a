"""Tests for the per-module call aggregator."""

from spectest_gen import ModuleCallAggregator


def test_register_keeps_insertion_order():
    calls = ModuleCallAggregator()
    calls.register(1, 'start_module_1')
    calls.register(1, 'c2_l4_action_invoke')
    calls.register(1, 'c3_l5_action_invoke')
    assert calls.pending(1) == ['start_module_1', 'c2_l4_action_invoke', 'c3_l5_action_invoke']


def test_flush_emits_one_batch_and_clears():
    calls = ModuleCallAggregator()
    calls.register(1, 'start_module_1')
    calls.register(1, 'c2_l4_action_invoke')

    batch = calls.flush(1)
    assert batch.module_index == 1
    assert batch.calls == ('start_module_1', 'c2_l4_action_invoke')
    assert calls.pending(1) == []
    assert calls.flush(1) is None


def test_flush_of_empty_index_emits_nothing():
    calls = ModuleCallAggregator()
    assert calls.flush(0) is None
    assert calls.flush(7) is None
    assert not calls.has_pending()


def test_modules_are_independent():
    calls = ModuleCallAggregator()
    calls.register(1, 'a')
    calls.register(2, 'b')
    assert calls.flush(2).calls == ('b',)
    assert calls.has_pending()
    assert calls.flush(1).calls == ('a',)
    assert not calls.has_pending()


def test_every_name_flushed_exactly_once():
    calls = ModuleCallAggregator()
    names = [f'c{i}_l{i}_action_invoke' for i in range(1, 6)]
    for i, name in enumerate(names):
        calls.register(1 + i % 2, name)
    calls.flush(1)
    calls.flush(2)
    calls.flush(1)
    assert sorted(calls.flushed) == sorted(names)
    assert len(set(calls.flushed)) == len(calls.flushed)


def test_batch_renders_calls_in_order():
    calls = ModuleCallAggregator()
    calls.register(3, 'start_module_3')
    calls.register(3, 'c9_l20_action_invoke')
    source = calls.flush(3).render()
    assert 'def test_module_3(self):' in source
    assert 'instance = self.create_module_3()' in source
    assert source.index('self.start_module_3(instance)') < source.index('self.c9_l20_action_invoke(instance)')
