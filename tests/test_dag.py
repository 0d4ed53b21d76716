"""
Tests for the resource reference DAG.
"""

import pytest
from openclaw_vps.core.dag import DAG


class TestDAG:
    """Tests for DAG class."""

    def test_empty_dag(self):
        """Test creating an empty DAG."""
        dag = DAG()

        assert len(dag) == 0
        assert dag.topological_sort() == []

    def test_add_node(self):
        """Test adding nodes to DAG."""
        dag = DAG()

        node = dag.add_node("sg", "aws:ec2/securityGroup:SecurityGroup")

        assert "sg" in dag.nodes
        assert node.kind == "aws:ec2/securityGroup:SecurityGroup"
        assert node.dependencies == ()

    def test_duplicate_node_rejected(self):
        dag = DAG()
        dag.add_node("sg", "kind")

        with pytest.raises(ValueError, match="already exists"):
            dag.add_node("sg", "kind")

    def test_add_node_with_dependencies(self):
        dag = DAG()
        dag.add_node("sg", "kind")
        dag.add_node("profile", "kind")

        dag.add_node("lt", "kind", dependencies=["sg", "profile"])

        # lt references sg and profile
        assert dag.get_dependencies("lt") == ["sg", "profile"]
        assert dag.edges() == [("sg", "lt"), ("profile", "lt")]

    def test_dependency_must_exist_first(self):
        """A node can only reference nodes added before it."""
        dag = DAG()
        dag.add_node("sg", "kind")

        with pytest.raises(ValueError, match="not in DAG: missing"):
            dag.add_node("lt", "kind", dependencies=["sg", "missing"])

        assert "lt" not in dag.nodes

    def test_self_reference_rejected(self):
        dag = DAG()

        with pytest.raises(ValueError, match="cannot depend on itself"):
            dag.add_node("r1", "kind", dependencies=["r1"])

        assert len(dag) == 0

    def test_topological_sort_follows_declarations(self):
        """Test ordering with parallel branches."""
        dag = DAG()
        dag.add_node("sg", "kind")
        dag.add_node("role", "kind")
        dag.add_node("policy", "kind", dependencies=["role"])
        dag.add_node("profile", "kind", dependencies=["role"])
        dag.add_node("lt", "kind", dependencies=["sg", "profile"])
        dag.add_node("asg", "kind", dependencies=["lt"])

        order = dag.topological_sort()

        assert order == ["sg", "role", "policy", "profile", "lt", "asg"]
        for src, dst in dag.edges():
            assert order.index(src) < order.index(dst)

    def test_remove_unreferenced_node(self):
        dag = DAG()
        dag.add_node("sg", "kind")
        dag.add_node("lt", "kind", dependencies=["sg"])

        dag.remove_node("lt")

        assert dag.topological_sort() == ["sg"]
        assert dag.edges() == []

    def test_remove_referenced_node_rejected(self):
        dag = DAG()
        dag.add_node("sg", "kind")
        dag.add_node("lt", "kind", dependencies=["sg"])

        with pytest.raises(ValueError, match="referenced by: lt"):
            dag.remove_node("sg")

        assert len(dag) == 2

    def test_to_dict(self):
        """Test converting DAG to dictionary."""
        dag = DAG()
        dag.add_node("sg", "kind-a", metadata={"properties": ["egress"]})
        dag.add_node("lt", "kind-b", dependencies=["sg"])

        result = dag.to_dict()

        assert [n["name"] for n in result["nodes"]] == ["sg", "lt"]
        assert result["nodes"][0]["metadata"] == {"properties": ["egress"]}
        assert result["nodes"][1]["dependencies"] == ["sg"]
        assert result["edges"] == [{"from": "sg", "to": "lt"}]
