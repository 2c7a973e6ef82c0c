from dataclasses import replace

import pytest

from entitygen.errors import GenerationError
from entitygen.generator import artifact_file_names, generate_artifacts, render_artifact
from entitygen.model import (
    ArtifactKind,
    CascadeKind,
    Field,
    GenerationOptions,
    JoinColumn,
    JoinTable,
    Relationship,
    Schema,
    SerializationConfig,
    ValidationRule,
)
from entitygen.syntax import check_java_syntax, declared_fields


def _imports(source):
    return [line for line in source.splitlines() if line.startswith("import ")]


def test_artifacts_come_in_fixed_order(product_schema):
    out = generate_artifacts(product_schema)
    assert list(out) == [
        ArtifactKind.ENTITY,
        ArtifactKind.DTO,
        ArtifactKind.REPOSITORY,
        ArtifactKind.SERVICE,
        ArtifactKind.CONTROLLER,
    ]


def test_file_names_use_canonical_name():
    names = artifact_file_names("Products")
    assert list(names.values()) == [
        "Product.java",
        "ProductDTO.java",
        "ProductRepository.java",
        "ProductService.java",
        "ProductController.java",
    ]


def test_generation_is_deterministic(product_schema):
    assert generate_artifacts(product_schema) == generate_artifacts(product_schema)


def test_every_artifact_parses_and_has_sorted_imports(product_schema):
    for kind, source in generate_artifacts(product_schema).items():
        assert check_java_syntax(source) is None, kind
        assert source.startswith("package com.acme.shop;\n")
        assert '@Generated("entitygen")' in source
        imports = _imports(source)
        assert imports == sorted(set(imports))


def test_entity_body(product_schema):
    src = generate_artifacts(product_schema)[ArtifactKind.ENTITY]
    assert "public class Product {" in src
    assert '@Table(name = "product")' in src
    assert "@Id\n    @GeneratedValue(strategy = GenerationType.AUTO)\n    private Long id;" in src
    assert '@Column(name = "name", nullable = false, length = 100)' in src
    assert "@NotBlank\n" in src
    assert '@Size(min = 2, max = 100, message = "Name must be 2-100 chars")' in src
    assert '@Column(name = "price", precision = 10, scale = 2)' in src
    assert '@DecimalMin(value = "0", inclusive = false)' in src
    assert "private Boolean active = true;" in src
    assert "@ManyToOne(fetch = FetchType.LAZY, optional = false)" in src
    assert '@JoinColumn(name = "category_id")' in src
    assert "@PrePersist\n    protected void onCreate()" in src
    assert "@PreUpdate\n    protected void onUpdate()" in src
    assert " * A product in the catalog" in src


def test_entity_fields_in_declaration_order(product_schema):
    src = generate_artifacts(product_schema)[ArtifactKind.ENTITY]
    assert declared_fields(src)["Product"] == [
        ("Long", "id"),
        ("String", "name"),
        ("BigDecimal", "price"),
        ("Boolean", "active"),
        ("Category", "category"),
        ("LocalDateTime", "createdAt"),
        ("LocalDateTime", "updatedAt"),
    ]


def test_surrogate_identifier_without_primary_key():
    schema = Schema("Orders", fields=[Field("total", "Double"), Field("id", "String")])
    out = generate_artifacts(schema)
    entity = out[ArtifactKind.ENTITY]
    assert "@GeneratedValue(strategy = GenerationType.IDENTITY)\n    private Long id;" in entity
    assert declared_fields(entity)["Order"][:2] == [("Long", "id"), ("Double", "total")]
    assert "JpaRepository<Order, Long>" in out[ArtifactKind.REPOSITORY]


def test_column_is_only_emitted_when_customized():
    schema = Schema("Note", fields=[Field("id", "Long", primary_key=True), Field("body", "String")])
    src = generate_artifacts(schema)[ArtifactKind.ENTITY]
    assert '@Column(name = "body"' not in src
    schema.fields[1].unique = True
    src = generate_artifacts(schema)[ArtifactKind.ENTITY]
    assert '@Column(name = "body", unique = true)' in src


def test_unknown_validation_rule_is_dropped():
    schema = Schema(
        "Customer",
        fields=[
            Field("id", "Long", primary_key=True),
            Field("email", "String", validations=[ValidationRule("Bogus", {"x": 1}), ValidationRule("Email")]),
        ],
    )
    src = generate_artifacts(schema)[ArtifactKind.ENTITY]
    assert "@Email\n    private String email;" in src
    assert "Bogus" not in src


def test_validation_disabled_drops_constraints_and_valid(product_schema):
    schema = replace(product_schema, options=GenerationOptions(enable_validation=False))
    out = generate_artifacts(schema)
    assert "@NotBlank" not in out[ArtifactKind.ENTITY]
    assert "@Valid" not in out[ArtifactKind.CONTROLLER]


def test_invalid_relationship_kind_fails_naming_it(product_schema):
    product_schema.relationships.append(Relationship("InvalidKind", "parts", "Part"))
    with pytest.raises(GenerationError, match="InvalidKind"):
        generate_artifacts(product_schema)


def test_blank_field_type_fails():
    with pytest.raises(GenerationError):
        generate_artifacts(Schema("Product", fields=[Field("name", " ")]))


def test_bad_integer_parameter_fails():
    schema = Schema("Product", fields=[Field("name", "String", validations=[ValidationRule("Size", {"max": "ten!"})])])
    with pytest.raises(GenerationError, match="Size.max"):
        generate_artifacts(schema)


def test_to_many_relationship_with_join_table():
    schema = Schema(
        "Students",
        fields=[Field("id", "Long", primary_key=True)],
        relationships=[
            Relationship(
                "ManyToMany",
                "courses",
                "Course",
                cascade=["persist", "merge"],
                optional=False,
                join_table=JoinTable(
                    name="student_course",
                    join_columns=[JoinColumn(name="student_id")],
                    inverse_join_columns=[JoinColumn(name="course_id", foreign_key="fk_course")],
                ),
            ),
            Relationship("OneToMany", "grades", "Grade", mapped_by="student", fetch="EAGER"),
        ],
    )
    src = generate_artifacts(schema)[ArtifactKind.ENTITY]
    assert check_java_syntax(src) is None
    assert "@ManyToMany(cascade = {CascadeType.PERSIST, CascadeType.MERGE})" in src
    assert (
        '@JoinTable(name = "student_course", joinColumns = @JoinColumn(name = "student_id"), '
        'inverseJoinColumns = @JoinColumn(name = "course_id", foreignKey = @ForeignKey(name = "fk_course")))'
    ) in src
    assert "private List<Course> courses = new ArrayList<>();" in src
    assert '@OneToMany(mappedBy = "student", fetch = FetchType.EAGER)' in src
    assert "import java.util.ArrayList;" in src


def test_mapped_by_is_not_emitted_on_many_to_one():
    schema = Schema(
        "Order",
        fields=[Field("id", "Long", primary_key=True)],
        relationships=[Relationship("ManyToOne", "customer", "Customer", mapped_by="orders")],
    )
    src = generate_artifacts(schema)[ArtifactKind.ENTITY]
    assert "mappedBy" not in src
    assert "@ManyToOne\n    private Customer customer;" in src


def test_dto_excludes_relationships_and_repeats_no_identifier(product_schema):
    src = generate_artifacts(product_schema)[ArtifactKind.DTO]
    assert declared_fields(src)["ProductDTO"] == [
        ("Long", "id"),
        ("String", "name"),
        ("BigDecimal", "price"),
        ("Boolean", "active"),
        ("LocalDateTime", "createdAt"),
        ("LocalDateTime", "updatedAt"),
    ]
    assert src.count("private Long id;") == 1


def test_dto_documentation_and_serialization(product_schema):
    src = generate_artifacts(product_schema)[ArtifactKind.DTO]
    assert '@Schema(description = "A product in the catalog")\npublic class ProductDTO {' in src
    assert '@Schema(description = "Product name", example = "Laptop", required = true)' in src
    assert '@JsonProperty("productName")' in src


def test_dto_serialization_access_and_format():
    schema = Schema(
        "Event",
        fields=[
            Field("id", "Long", primary_key=True),
            Field(
                "startsAt",
                "LocalDateTime",
                serialization=SerializationConfig(pattern="yyyy-MM-dd HH:mm", timezone="UTC", read_only=True),
            ),
            Field("secret", "String", serialization=SerializationConfig(ignore=True)),
        ],
    )
    src = generate_artifacts(schema)[ArtifactKind.DTO]
    assert "@JsonProperty(access = JsonProperty.Access.READ_ONLY)" in src
    assert '@JsonFormat(shape = JsonFormat.Shape.STRING, pattern = "yyyy-MM-dd HH:mm", timezone = "UTC")' in src
    assert "@JsonIgnore\n    private String secret;" in src
    assert check_java_syntax(src) is None


def test_documentation_disabled(product_schema):
    schema = replace(product_schema, options=GenerationOptions(enable_documentation=False))
    src = generate_artifacts(schema)[ArtifactKind.DTO]
    assert "@Schema" not in src
    assert "@JsonProperty" in src


def test_repository_and_service(product_schema):
    out = generate_artifacts(product_schema)
    assert "public interface ProductRepository extends JpaRepository<Product, Long> {\n}" in out[ArtifactKind.REPOSITORY]
    service = out[ArtifactKind.SERVICE]
    assert "private final ProductRepository repository;" in service
    assert 'new EntityNotFoundException("Product not found with id: " + id)' in service
    assert "public void deleteById(Long id)" in service


def test_controller_mapping(product_schema):
    src = generate_artifacts(product_schema)[ArtifactKind.CONTROLLER]
    assert '@RequestMapping("/api/products")' in src
    assert "create(@Valid @RequestBody ProductDTO dto)" in src
    assert "ResponseEntity.status(HttpStatus.CREATED)" in src
    assert "ResponseEntity.noContent().build()" in src
    assert "dto.setId(entity.getId());" in src
    assert "entity.setId(" not in src
    order = [src.index(f"dto.set{n}(entity.get{n}())") for n in ("Name", "Price", "Active", "CreatedAt")]
    assert order == sorted(order)
    assert "entity.setName(dto.getName());" in src


def test_controller_copies_assigned_identifier_and_prefix():
    schema = Schema("Country", fields=[Field("code", "String", primary_key=True), Field("label", "String")])
    src = render_artifact(schema, ArtifactKind.CONTROLLER, api_prefix="/v2/")
    assert '@RequestMapping("/v2/countries")' in src
    assert "entity.setCode(dto.getCode());" in src
    assert "getById(@PathVariable String id)" in src
    assert check_java_syntax(src) is None


def test_uuid_identifier_imports():
    schema = Schema("Token", fields=[Field("id", "UUID", primary_key=True)])
    out = generate_artifacts(schema)
    assert "@GeneratedValue(strategy = GenerationType.AUTO)" in out[ArtifactKind.ENTITY]
    assert "import java.util.UUID;" in out[ArtifactKind.REPOSITORY]
    assert "JpaRepository<Token, UUID>" in out[ArtifactKind.REPOSITORY]
    for source in out.values():
        assert check_java_syntax(source) is None


def test_default_package_and_status_name():
    out = generate_artifacts(Schema("Status", fields=[Field("label", "String")]))
    entity = out[ArtifactKind.ENTITY]
    assert entity.startswith("package com.example.generated;")
    assert "public class Status {" in entity


def test_cascade_kinds_are_checked():
    schema = Schema(
        "Order",
        relationships=[Relationship("OneToMany", "lines", "Line", cascade=["EVERYTHING"])],
    )
    with pytest.raises(GenerationError, match="cascade"):
        generate_artifacts(schema)
    assert CascadeKind.parse("remove") is CascadeKind.REMOVE


def test_description_cannot_close_the_javadoc():
    schema = Schema("Coupon", description="Glob like /api/* and */ end", fields=[Field("code", "String")])
    src = generate_artifacts(schema)[ArtifactKind.ENTITY]
    assert " * Glob like /api/* and *&#47; end" in src
    assert check_java_syntax(src) is None


def test_extra_primary_keys_stay_out_of_dto_and_mapping():
    schema = Schema(
        "Line",
        fields=[
            Field("orderId", "Long", primary_key=True),
            Field("lineNo", "Integer", primary_key=True),
            Field("qty", "Integer"),
        ],
    )
    out = generate_artifacts(schema)
    assert declared_fields(out[ArtifactKind.DTO])["LineDTO"] == [
        ("Long", "orderId"),
        ("Integer", "qty"),
        ("LocalDateTime", "createdAt"),
        ("LocalDateTime", "updatedAt"),
    ]
    controller = out[ArtifactKind.CONTROLLER]
    assert "LineNo" not in controller
    assert "entity.setQty(dto.getQty());" in controller
    assert "private Integer lineNo;" in out[ArtifactKind.ENTITY]
    assert check_java_syntax(controller) is None
