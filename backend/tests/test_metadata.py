import pytest

from core.binning import DATE_DEFAULT_INDEX, DATETIME_DIMENSION_INDEXES, dimension_options_for_response, strategy_of
from core.exceptions import InvalidFieldState
from core.metadata import table_fks, table_query_metadata, virtual_table_metadata
from models.fingerprint import TextFingerprint
from models.table import ResultColumn


def _by_name(metadata):
    return {f.name: f for f in metadata.fields}


def test_fields_come_back_in_position_order(repo, sample):
    metadata = table_query_metadata(repo.snapshot(sample.venues.id))
    assert [f.name for f in metadata.fields] == ["ID", "CATEGORY_ID", "LATITUDE", "PRICE"]
    assert metadata.pk_field == sample.venue_id.id
    assert metadata.db.id == sample.db.id
    assert list(metadata.dimension_options) == list(dimension_options_for_response())


def test_sensitive_fields_are_excluded_by_default(repo, sample):
    metadata = table_query_metadata(repo.snapshot(sample.users.id))
    assert [f.name for f in metadata.fields] == ["ID", "LAST_LOGIN", "NAME"]
    assert _by_name(metadata)["NAME"].values == [["Broen Olujimi"], ["Kfir Caj"], ["Simcha Yan"]]

    with_sensitive = table_query_metadata(repo.snapshot(sample.users.id), include_sensitive_fields=True)
    fields = _by_name(with_sensitive)
    assert list(fields) == ["ID", "LAST_LOGIN", "NAME", "PASSWORD"]
    assert fields["PASSWORD"].visibility_type == "sensitive"
    assert fields["PASSWORD"].values == []


def test_retired_fields_never_appear(repo, sample):
    repo.update_field(sample.price.id, visibility_type="retired")
    metadata = table_query_metadata(repo.snapshot(sample.venues.id), include_sensitive_fields=True)
    assert "PRICE" not in _by_name(metadata)


def test_datetime_field_options(repo, sample):
    last_login = _by_name(table_query_metadata(repo.snapshot(sample.users.id)))["LAST_LOGIN"]
    assert last_login.dimension_options == DATETIME_DIMENSION_INDEXES
    assert last_login.default_dimension_option == DATE_DEFAULT_INDEX


def test_internal_remap_scenario(repo, sample):
    repo.set_field_values(sample.category_id.id, [3, 1, 4, 2], ["v2", "v0", "v3", "v1"])
    repo.set_dimension(sample.category_id.id, "Foo", "internal")
    fields = _by_name(table_query_metadata(repo.snapshot(sample.venues.id)))

    category = fields["CATEGORY_ID"]
    assert category.values == [[0, "v0"], [1, "v1"], [2, "v2"], [3, "v3"]]
    assert category.dimensions.model_dump(exclude={"id"}) == {
        "name": "Foo", "type": "internal", "field_id": sample.category_id.id, "human_readable_field_id": None,
    }
    assert fields["PRICE"].values == [[1], [2], [3], [4]]
    assert fields["PRICE"].dimensions == []


def test_external_remap_scenario(repo, sample):
    repo.set_dimension(sample.category_id.id, "Foo", "external", sample.cat_name.id)
    fields = _by_name(table_query_metadata(repo.snapshot(sample.venues.id)))

    category = fields["CATEGORY_ID"]
    assert category.values == []
    assert category.dimensions.type == "external"
    assert category.dimensions.human_readable_field_id == sample.cat_name.id
    assert category.target.id == sample.cat_id.id


def test_price_binning_scenario(repo, sample):
    repo.update_field(sample.price.id, special_type=None)
    price = _by_name(table_query_metadata(repo.snapshot(sample.venues.id)))["PRICE"]
    assert {strategy_of(i) for i in price.dimension_options} == {None, "num-bins", "default"}
    assert price.values == []

    repo.update_field(sample.price.id, fingerprint={"kind": "type/Number", "min": None, "max": None})
    price = _by_name(table_query_metadata(repo.snapshot(sample.venues.id)))["PRICE"]
    assert price.dimension_options == []
    assert price.default_dimension_option is None


def test_latitude_scenario(repo, sample):
    latitude = _by_name(table_query_metadata(repo.snapshot(sample.venues.id)))["LATITUDE"]
    strategies = {strategy_of(i) for i in latitude.dimension_options}
    assert "num-bins" not in strategies
    assert {"bin-width", "default"} <= strategies


def test_unreadable_fk_target_is_suppressed(repo, sample):
    readable = frozenset({sample.venues.id})
    category = _by_name(table_query_metadata(repo.snapshot(sample.venues.id), readable_table_ids=readable))["CATEGORY_ID"]
    assert category.target is None
    assert category.fk_target_field_id == sample.cat_id.id


def test_assembly_is_deterministic(repo, sample):
    repo.set_dimension(sample.category_id.id, "Foo", "internal")
    first = table_query_metadata(repo.snapshot(sample.venues.id)).model_dump_json(by_alias=True)
    second = table_query_metadata(repo.snapshot(sample.venues.id)).model_dump_json(by_alias=True)
    assert first == second


def test_invalid_field_state_propagates(repo, sample):
    repo.update_field(sample.price.id, fingerprint=TextFingerprint(average_length=1.0))
    with pytest.raises(InvalidFieldState):
        table_query_metadata(repo.snapshot(sample.venues.id))


def test_virtual_table_metadata(repo, sample):
    card = repo.add_card("Go Dubs!", sample.db.id, [
        ResultColumn(name="NAME", display_name="Name", base_type="type/Text"),
        ResultColumn(name="LATITUDE", display_name="Latitude", base_type="type/Float"),
    ])
    metadata = virtual_table_metadata(card).model_dump(by_alias=True)
    assert metadata["id"] == f"card__{card.id}"
    assert metadata["db_id"] == -1337
    assert metadata["schema"] == "Everything else"
    assert metadata["fields"][1] == {
        "name": "LATITUDE",
        "display_name": "Latitude",
        "base_type": "type/Float",
        "table_id": f"card__{card.id}",
        "id": ["field-literal", "LATITUDE", "type/Float"],
        "special_type": None,
    }


def test_incoming_foreign_keys(repo, sample):
    fks = table_fks(repo.snapshot(sample.categories.id))
    assert len(fks) == 1
    assert fks[0].origin_id == sample.category_id.id
    assert fks[0].destination_id == sample.cat_id.id
    assert fks[0].relationship == "Mt1"
    assert fks[0].origin.table.name == "VENUES"
    assert table_fks(repo.snapshot(sample.users.id)) == []
