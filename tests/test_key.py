from libgitops.storage.key import GroupVersion, GroupVersionKind, KindKey, ObjectKey


def test_with_kind():
    gv = GroupVersion("sample.example.com", "v1alpha1")
    assert gv.with_kind("Car") == GroupVersionKind("sample.example.com", "v1alpha1", "Car")


def test_group_version_str_without_group():
    assert str(GroupVersion("", "v1")) == "v1"


def test_kind_key_str():
    assert str(KindKey("g", "v", "K")) == "g/v, Kind=K"


def test_kind_key_gvk():
    assert KindKey("g", "v", "K").gvk == GroupVersionKind("g", "v", "K")


def test_equals_gvk_respecting_version():
    a = KindKey("g", "v1", "Car")
    assert a.equals_gvk(KindKey("g", "v1", "Car"), True) is True
    assert a.equals_gvk(KindKey("g", "v2", "Car"), True) is False


def test_equals_gvk_ignoring_version():
    a = KindKey("g", "v1", "Car")
    assert a.equals_gvk(KindKey("g", "v2", "Car"), False) is True


def test_equals_gvk_kind_or_group_mismatch():
    a = KindKey("g", "v1", "Car")
    assert a.equals_gvk(KindKey("g", "v1", "Truck"), False) is False
    assert a.equals_gvk(KindKey("other", "v1", "Car"), False) is False


def test_object_key_properties_and_str():
    kind = KindKey("g", "v", "Car")
    key = ObjectKey(kind, "foo")
    assert (key.group, key.version, key.kind) == ("g", "v", "Car")
    assert key.gvk == kind.gvk
    assert str(key) == f"{kind} foo"


def test_object_key_equals_kind_key():
    key = ObjectKey(KindKey("g", "v1", "Car"), "foo")
    assert key.equals_gvk(KindKey("g", "v2", "Car"), False) is True
    assert key.equals_gvk(KindKey("g", "v2", "Car"), True) is False


def test_object_key_hashable_and_equal():
    first = ObjectKey(KindKey("g", "v", "Car"), "foo")
    second = ObjectKey(KindKey("g", "v", "Car"), "foo")
    mapping = {first: "path"}
    assert mapping[second] == "path"