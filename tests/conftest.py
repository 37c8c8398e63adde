import pytest
from graphql import build_schema


@pytest.fixture
def schema():
    """Pets schema with an interface and a union over the same object types."""
    return build_schema(
        """
        type Query {
            dog: Dog
            cat: Cat
            animals: [Animal]
            pets: [CatOrDog]
        }
        union CatOrDog = Cat | Dog

        interface Animal {
            name: String
        }
        type Dog implements Animal {
            name: String
            id: ID
        }
        type Cat implements Animal {
            name: String
        }
        """
    )


@pytest.fixture
def nested_schema():
    """Two levels of interfaces below the query root."""
    return build_schema(
        """
        type Query {
            a: [A]
            object: Object
        }
        type Object {
            someValue: String
        }
        interface A {
            b: B
        }
        type A1 implements A {
            b: B
        }
        type A2 implements A {
            b: B
        }
        interface B {
            leaf: String
        }
        type B1 implements B {
            leaf: String
        }
        type B2 implements B {
            leaf: String
        }
        """
    )
