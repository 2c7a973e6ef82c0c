from dataclasses import replace

from entitygen.config import GeneratorConfig
from entitygen.hub import EntityGenHub
from entitygen.model import Field, Relationship, Schema


def _hub(root, **kw):
    return EntityGenHub(GeneratorConfig(project_root=root, **kw))


def _pkg_dir(root):
    return root / "src" / "main" / "java" / "com" / "acme" / "shop"


def test_generate_writes_five_files(tmp_path, product_schema):
    result = _hub(tmp_path).generate(product_schema)
    assert result.success, result.message
    assert result.entity_name == "Product"
    assert result.error_kind is None
    names = sorted(p.name for p in _pkg_dir(tmp_path).iterdir())
    assert names == [
        "Product.java",
        "ProductController.java",
        "ProductDTO.java",
        "ProductRepository.java",
        "ProductService.java",
    ]
    assert len(result.generated_files) == 5
    assert result.skipped == ()


def test_existing_files_are_skipped_without_overwrite(tmp_path, product_schema):
    hub = _hub(tmp_path)
    hub.generate(product_schema)
    entity = _pkg_dir(tmp_path) / "Product.java"
    entity.write_text("// edited by hand\n", encoding="utf-8")

    result = hub.generate(product_schema)
    assert result.success
    assert len(result.skipped) == 5
    assert "skipped" in result.message
    assert entity.read_text(encoding="utf-8") == "// edited by hand\n"


def test_overwrite_is_idempotent(tmp_path, product_schema):
    hub = _hub(tmp_path)
    hub.generate(product_schema, overwrite=True)
    first = {p.name: p.read_text(encoding="utf-8") for p in _pkg_dir(tmp_path).iterdir()}
    result = hub.generate(product_schema, overwrite=True)
    second = {p.name: p.read_text(encoding="utf-8") for p in _pkg_dir(tmp_path).iterdir()}
    assert result.skipped == ()
    assert first == second


def test_validation_failure_writes_nothing(tmp_path):
    result = _hub(tmp_path).generate(Schema(entity_name=""))
    assert not result.success
    assert result.error_kind == "validation"
    assert "Entity name is required" in result.message
    assert not (tmp_path / "src").exists()


def test_batch_isolates_failures_and_keeps_order(tmp_path, product_schema):
    broken = Schema(
        "Orders",
        package_name="com.acme.shop",
        fields=[Field("id", "Long", primary_key=True)],
        relationships=[Relationship("InvalidKind", "items", "Item")],
    )
    customer = Schema("Customer", package_name="com.acme.shop", fields=[Field("email", "String")])

    batch = _hub(tmp_path).generate_batch([product_schema, broken, customer])

    assert batch.total_processed == 3
    assert batch.success_count == 2
    assert batch.error_count == 1
    assert batch.success_count + batch.error_count == batch.total_processed
    assert [r.entity_name for r in batch.results] == ["Product", "Order", "Customer"]
    assert [r.success for r in batch.results] == [True, False, True]
    assert batch.results[1].error_kind == "generation"
    assert "InvalidKind" in batch.results[1].message
    assert not (_pkg_dir(tmp_path) / "Order.java").exists()
    assert (_pkg_dir(tmp_path) / "Customer.java").exists()


def test_preview_touches_no_files(tmp_path, product_schema):
    sources = _hub(tmp_path).preview(product_schema)
    assert list(sources) == [
        "Product.java",
        "ProductDTO.java",
        "ProductRepository.java",
        "ProductService.java",
        "ProductController.java",
    ]
    assert "public class ProductDTO" in sources["ProductDTO.java"]
    assert not (tmp_path / "src").exists()


def test_delete_and_list(tmp_path, product_schema):
    hub = _hub(tmp_path)
    hub.generate(product_schema)
    hub.generate(replace(product_schema, entity_name="Brand"))
    assert hub.list_generated("com.acme.shop") == ["Brand", "Product"]

    result = hub.delete("Products", "com.acme.shop")
    assert result.success
    assert result.message == "Deleted 5 artifact(s) for Product"
    assert hub.list_generated("com.acme.shop") == ["Brand"]

    again = hub.delete("Products", "com.acme.shop")
    assert again.success
    assert again.message == "Deleted 0 artifact(s) for Product"


def test_list_of_unknown_package_is_empty(tmp_path):
    assert _hub(tmp_path).list_generated("org.nowhere") == []


def test_default_package_from_config(tmp_path):
    hub = _hub(tmp_path, default_package="org.demo.model")
    result = hub.generate(Schema("Tag", fields=[Field("label", "String")]))
    assert result.success
    assert (tmp_path / "src/main/java/org/demo/model/Tag.java").exists()
    assert hub.list_generated() == ["Tag"]


def test_generate_from_source(tmp_path, customer_source):
    hub = _hub(tmp_path)
    result = hub.generate_from_source(customer_source)
    assert result.success, result.message
    assert (_pkg_dir(tmp_path) / "CustomerController.java").exists()

    failed = hub.generate_from_source("no java here")
    assert not failed.success
    assert failed.error_kind == "analysis"


def test_io_failure_is_reported(tmp_path, product_schema):
    blocker = tmp_path / "src" / "main" / "java" / "com"
    blocker.parent.mkdir(parents=True)
    blocker.write_text("not a directory", encoding="utf-8")

    result = _hub(tmp_path).generate(product_schema)
    assert not result.success
    assert result.error_kind == "io"


def test_catalogs():
    assert EntityGenHub.relationship_types() == ["OneToOne", "OneToMany", "ManyToOne", "ManyToMany"]
    rules = EntityGenHub.supported_validation_rules()
    assert len(rules) == 16
    assert "Email" in rules and "PastOrPresent" in rules
    assert "BigDecimal" in EntityGenHub.supported_types()


def test_description_with_comment_terminator_still_generates(tmp_path):
    schema = Schema("Coupon", package_name="com.acme.shop",
                    description="Glob like /api/* and */ end", fields=[Field("code", "String")])
    result = _hub(tmp_path).generate(schema)
    assert result.success, result.message
    assert "*&#47;" in (_pkg_dir(tmp_path) / "Coupon.java").read_text(encoding="utf-8")
