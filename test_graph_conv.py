#!/usr/bin/env python3
"""
Tests for the two-hop GraphConv: message widths, scatter-sum aggregation,
output shapes, edge-order invariance, and forward-time failures.
"""

import pytest
import torch

from edge_gnn.errors import ConfigError, EdgeIndexError, ShapeError
from edge_gnn.models import GraphConv, ScatterSumAggregate, TwoHopMessage


def _random_graph(num_nodes=6, num_edges=10, node_width=3, edge_width=2, seed=0):
    gen = torch.Generator().manual_seed(seed)
    edge_index = torch.randint(0, num_nodes, (2, num_edges), generator=gen)
    node_attr = torch.rand((num_nodes, node_width), generator=gen)
    edge_attr = torch.rand((num_edges, edge_width), generator=gen)
    edge_weight = torch.rand((num_edges, 1), generator=gen)
    return edge_index, node_attr, edge_attr, edge_weight


def _conv(node_width=3, edge_width=2, out_width=5, initial_width=3):
    torch.manual_seed(0)
    conv = GraphConv(node_width, [16, 16], out_width, initial_width, edge_width)
    conv.eval()
    return conv


def test_dense_input_width_arithmetic():
    conv = GraphConv(4, [8], 6, 3, 2)
    assert conv.mlp.input_size == 5 * 4 + 3 + 4 * 2
    assert conv.mlp.output_size == 6


def test_message_widths_match_between_hops():
    edge_index, node_attr, edge_attr, edge_weight = _random_graph()
    message = TwoHopMessage()
    aggregate = ScatterSumAggregate()

    hop1 = message(edge_index, node_attr, edge_attr, edge_weight, 1)
    assert hop1.shape == (10, 3 + 2)

    one_hop = aggregate(edge_index, hop1, node_attr.size(0))
    hop2 = message(edge_index, one_hop, edge_attr, edge_weight, 2)
    assert hop2.shape == hop1.shape


def test_message_values_on_small_chain():
    edge_index = torch.tensor([[0, 1], [1, 2]])
    node_attr = torch.tensor([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    edge_attr = torch.tensor([[10.0], [20.0]])
    edge_weight = torch.tensor([[2.0], [0.5]])

    hop1 = TwoHopMessage()(edge_index, node_attr, edge_attr, edge_weight, 1)
    expected = torch.tensor([[2.0, 4.0, 20.0], [1.5, 2.0, 10.0]])
    assert torch.equal(hop1, expected)

    # 1-D weights broadcast the same way.
    hop2 = TwoHopMessage()(edge_index, node_attr, edge_attr, edge_weight.squeeze(-1), 2)
    assert torch.equal(hop2, torch.tensor([[2.0, 4.0], [1.5, 2.0]]))


def test_aggregate_sums_onto_targets_and_zero_fills():
    edge_index = torch.tensor([[0, 1, 3], [2, 2, 1]])
    messages = torch.tensor([[1.0, 1.0], [2.0, 3.0], [4.0, 5.0]])
    out = ScatterSumAggregate()(edge_index, messages, num_nodes=4)
    assert out.shape == (4, 2)
    assert torch.equal(out[2], torch.tensor([3.0, 4.0]))
    assert torch.equal(out[1], torch.tensor([4.0, 5.0]))
    # Nodes 0 and 3 receive nothing.
    assert torch.equal(out[0], torch.zeros(2))
    assert torch.equal(out[3], torch.zeros(2))


def test_propagate_directions_on_chain():
    conv = _conv(node_width=2, edge_width=1)
    edge_index = torch.tensor([[0, 1], [1, 2]])
    node_attr = torch.tensor([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    edge_attr = torch.tensor([[10.0], [20.0]])
    edge_weight = torch.ones(2, 1)

    incoming = conv.propagate(edge_index, node_attr, edge_attr, edge_weight, hop=1)
    outgoing = conv.propagate(edge_index.flip(0), node_attr, edge_attr, edge_weight, hop=1)
    assert torch.equal(incoming[0], torch.zeros(3))
    assert torch.equal(incoming[1], torch.tensor([1.0, 2.0, 10.0]))
    assert torch.equal(outgoing[2], torch.zeros(3))
    assert torch.equal(outgoing[1], torch.tensor([5.0, 6.0, 20.0]))

    # Two hops: node 2 sees node 0 through node 1, without a second edge-feature block.
    two_hop = conv.propagate(edge_index, incoming, edge_attr, edge_weight, hop=2)
    assert torch.equal(two_hop[2], torch.tensor([1.0, 2.0, 10.0]))


def test_forward_output_shape():
    conv = _conv()
    edge_index, node_attr, edge_attr, edge_weight = _random_graph(num_nodes=9, num_edges=14)
    out = conv(edge_index, node_attr, edge_attr, edge_weight, node_attr)
    assert out.shape == (9, 5)


def test_forward_without_edges():
    conv = _conv()
    node_attr = torch.rand(4, 3)
    out = conv(torch.empty((2, 0), dtype=torch.long), node_attr, torch.empty(0, 2), torch.empty(0, 1), node_attr)
    assert out.shape == (4, 5)


def test_forward_is_invariant_to_edge_order():
    conv = _conv()
    edge_index, node_attr, edge_attr, edge_weight = _random_graph(num_nodes=7, num_edges=15, seed=3)
    perm = torch.randperm(15, generator=torch.Generator().manual_seed(1))

    out = conv(edge_index, node_attr, edge_attr, edge_weight, node_attr)
    out_perm = conv(edge_index[:, perm], node_attr, edge_attr[perm], edge_weight[perm], node_attr)
    assert torch.allclose(out, out_perm, atol=1e-5)


def test_custom_message_and_aggregate_are_used():
    calls = []

    class RecordingMessage(TwoHopMessage):
        def __call__(self, edge_index, node_attr, edge_attr, edge_weight, hop):
            calls.append(hop)
            return super().__call__(edge_index, node_attr, edge_attr, edge_weight, hop)

    def mean_aggregate(edge_index, messages, num_nodes):
        total = ScatterSumAggregate()(edge_index, messages, num_nodes)
        count = torch.bincount(edge_index[1], minlength=num_nodes).clamp_min(1).unsqueeze(-1)
        return total / count

    conv = GraphConv(3, [8], 4, 3, 2, message_fn=RecordingMessage(), aggregate_fn=mean_aggregate)
    edge_index, node_attr, edge_attr, edge_weight = _random_graph()
    out = conv(edge_index, node_attr, edge_attr, edge_weight, node_attr)
    assert out.shape == (6, 4)
    assert calls == [1, 1, 2, 2]


@pytest.mark.parametrize("field", ["input_node_width", "output_node_width", "initial_node_width", "edge_width"])
def test_non_positive_widths_raise_config_error(field):
    kwargs = dict(input_node_width=3, output_node_width=4, initial_node_width=3, edge_width=2)
    kwargs[field] = 0
    with pytest.raises(ConfigError):
        GraphConv(hidden_sizes=[8], **kwargs)


def test_bad_hidden_sizes_raise_config_error():
    with pytest.raises(ConfigError):
        GraphConv(3, [], 4, 3, 2)
    with pytest.raises(ConfigError):
        GraphConv(3, [8, -1], 4, 3, 2)


def test_width_mismatch_raises_shape_error_at_forward():
    # Construction succeeds; the mismatch only surfaces once tensors are combined.
    conv = _conv(node_width=3, edge_width=2)
    edge_index, node_attr, edge_attr, edge_weight = _random_graph(node_width=4)
    with pytest.raises(ShapeError):
        conv(edge_index, node_attr, edge_attr, edge_weight, node_attr[:, :3])

    edge_index, node_attr, edge_attr, edge_weight = _random_graph(edge_width=3)
    with pytest.raises(ShapeError):
        conv(edge_index, node_attr, edge_attr, edge_weight, node_attr)


def test_edge_count_mismatch_raises_shape_error():
    conv = _conv()
    edge_index, node_attr, edge_attr, edge_weight = _random_graph()
    with pytest.raises(ShapeError):
        conv(edge_index, node_attr, edge_attr[:-1], edge_weight, node_attr)
    with pytest.raises(ShapeError):
        conv(edge_index, node_attr, edge_attr, edge_weight[:-1], node_attr)
    with pytest.raises(ShapeError):
        conv(edge_index, node_attr, edge_attr, edge_weight, node_attr[:-1])


@pytest.mark.parametrize("bad_index", [6, 100, -1])
def test_out_of_range_edge_index_raises(bad_index):
    conv = _conv()
    edge_index, node_attr, edge_attr, edge_weight = _random_graph(num_nodes=6)
    edge_index = edge_index.clone()
    edge_index[1, 0] = bad_index
    with pytest.raises(EdgeIndexError):
        conv(edge_index, node_attr, edge_attr, edge_weight, node_attr)
    with pytest.raises(IndexError):
        conv(edge_index, node_attr, edge_attr, edge_weight, node_attr)


def test_malformed_edge_index_raises():
    conv = _conv()
    _, node_attr, edge_attr, edge_weight = _random_graph()
    with pytest.raises(EdgeIndexError):
        conv(torch.zeros((3, 10), dtype=torch.long), node_attr, edge_attr, edge_weight, node_attr)
    with pytest.raises(EdgeIndexError):
        conv(torch.zeros((2, 10)), node_attr, edge_attr, edge_weight, node_attr)


if __name__ == "__main__":
    raise SystemExit(pytest.main([__file__, "-v"]))
