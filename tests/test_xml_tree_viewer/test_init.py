"""Test module for xml_tree_viewer package initialization."""


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import xml_tree_viewer

    # Assert
    assert xml_tree_viewer.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    # Arrange & Act
    import xml_tree_viewer

    # Assert
    assert xml_tree_viewer.__author__ == "XML Tree Viewer Team"


def test_package_exports_resolve() -> None:
    """Test that every name in __all__ is importable from the package."""
    # Arrange & Act
    import xml_tree_viewer

    # Assert
    for name in xml_tree_viewer.__all__:
        assert hasattr(xml_tree_viewer, name), name


def test_top_level_render() -> None:
    """Test the level-one API end to end."""
    # Arrange
    from xml_tree_viewer import render

    # Act
    result = render("<a/><b/>")

    # Assert
    assert result.success
    assert result.tree.tag_name == "(document)"
    assert result.outline == "<(document)>\n├── <a>\n└── <b>\n"
