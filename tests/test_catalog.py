from hanging_resources.catalog import RESOURCE_TYPES, Scope, custom_resource


def test_catalog_names_are_unique():
    names = [rt.name for rt in RESOURCE_TYPES]
    assert len(names) == len(set(names))


def test_namespace_is_cluster_scoped_and_swept_last():
    assert RESOURCE_TYPES[-1].name == "namespace"
    assert RESOURCE_TYPES[-1].scope is Scope.CLUSTER
    assert not RESOURCE_TYPES[-1].namespaced


def test_builtin_workloads_are_namespaced():
    by_name = {rt.name: rt for rt in RESOURCE_TYPES}
    for name in ("deployment", "replicaset", "statefulset", "pod"):
        assert by_name[name].namespaced


def test_custom_resource_name_is_plural_dot_group():
    rt = custom_resource("notebooks", "kubeflow.org")
    assert rt.name == "notebooks.kubeflow.org"
    assert rt.group == "kubeflow.org"
    assert rt.plural == "notebooks"
    assert rt.namespaced


def test_custom_resources_carry_their_group():
    for rt in RESOURCE_TYPES:
        if "." in rt.name:
            assert rt.name == f"{rt.plural}.{rt.group}"
