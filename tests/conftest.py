from __future__ import annotations

import pytest

from entitygen.model import (
    DocumentationConfig,
    Field,
    JoinColumn,
    Relationship,
    Schema,
    SerializationConfig,
    ValidationRule,
)

CUSTOMER_SOURCE = '''package com.acme.shop;

import jakarta.persistence.*;
import jakarta.validation.constraints.*;

/**
 * Customer entity. @NotNull here is only a comment.
 */
@Entity
public class Customer {

    @Id
    @GeneratedValue(strategy = GenerationType.IDENTITY)
    private Long id;

    @NotBlank(message = "Name is required")
    @Size(min = 2, max = 50)
    @Column(name = "full_name", nullable = false, length = 50)
    private String name;

    // contact address
    @Email
    private String email;

    @DecimalMin("0.5")
    private Double rating;

    @Min(18)
    private Integer age;

    @ManyToOne(fetch = FetchType.LAZY, optional = false)
    @JoinColumn(name = "group_id")
    private CustomerGroup group;

    @OneToMany(mappedBy = "customer", cascade = {CascadeType.PERSIST, CascadeType.MERGE})
    private List<Order> orders = new ArrayList<>();

    private static final long serialVersionUID = 1L;

    public String getName() {
        return name;
    }
}
'''


def make_product() -> Schema:
    return Schema(
        entity_name="Products",
        package_name="com.acme.shop",
        description="A product in the catalog",
        fields=[
            Field("id", "Long", primary_key=True),
            Field(
                "name",
                "String",
                nullable=False,
                length=100,
                validations=[
                    ValidationRule("NotBlank"),
                    ValidationRule("Size", {"min": 2, "max": 100}, message="Name must be 2-100 chars"),
                ],
                documentation=DocumentationConfig(description="Product name", example="Laptop", required=True),
                serialization=SerializationConfig(property_name="productName"),
            ),
            Field(
                "price",
                "BigDecimal",
                precision=10,
                scale=2,
                validations=[ValidationRule("DecimalMin", {"value": 0.0, "inclusive": False})],
            ),
            Field("active", "Boolean", default_value="true"),
        ],
        relationships=[
            Relationship(
                "ManyToOne",
                "category",
                "Category",
                fetch="LAZY",
                optional=False,
                join_column=JoinColumn(name="category_id"),
            ),
        ],
    )


@pytest.fixture
def product_schema() -> Schema:
    return make_product()


@pytest.fixture
def customer_source() -> str:
    return CUSTOMER_SOURCE
