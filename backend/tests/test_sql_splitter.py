"""Tests for the delimiter-aware statement splitter."""
from propmgr.sql_splitter import (
    is_comment_only,
    split_statements,
    starts_with_keyword,
)


TRIGGER_SCRIPT = """CREATE TABLE A (id INT PRIMARY KEY, total INT);
DELIMITER //
CREATE TRIGGER T BEFORE INSERT ON A
FOR EACH ROW
BEGIN
    SET NEW.total = 0;
    IF NEW.id < 0 THEN
        SET NEW.id = 0;
    END IF;
END //
DELIMITER ;
"""


class TestSplitStatements:
    """Boundary detection and segmentation."""

    def test_table_and_trigger_become_two_statements(self):
        statements = split_statements(TRIGGER_SCRIPT)

        assert len(statements) == 2
        assert statements[0] == "CREATE TABLE A (id INT PRIMARY KEY, total INT);"
        assert statements[1].startswith("CREATE TRIGGER T")
        assert statements[1].endswith("END;")

    def test_routine_body_is_not_split_at_inner_terminators(self):
        body = split_statements(TRIGGER_SCRIPT)[1]
        assert "SET NEW.total = 0;" in body
        assert "END IF;" in body

    def test_delimiter_lines_are_removed(self):
        for statement in split_statements(TRIGGER_SCRIPT):
            assert "DELIMITER" not in statement

    def test_terminator_on_its_own_line(self):
        script = (
            "DELIMITER //\n"
            "CREATE PROCEDURE list_rooms()\n"
            "BEGIN\n"
            "    SELECT * FROM Room;\n"
            "END;\n"
            "//\n"
            "CREATE FUNCTION one() RETURNS INT DETERMINISTIC\n"
            "RETURN 1;\n"
            "//\n"
            "DELIMITER ;\n"
        )
        statements = split_statements(script)

        assert len(statements) == 2
        assert statements[0].startswith("CREATE PROCEDURE list_rooms()")
        assert statements[0].endswith("END;")
        assert statements[1] == "CREATE FUNCTION one() RETURNS INT DETERMINISTIC\nRETURN 1;"

    def test_url_double_slash_is_not_a_boundary(self):
        script = (
            "INSERT INTO Property (Property_Name, Image_URL)\n"
            "VALUES ('Demo Rental', 'https://images.example.com/photo.jpg');\n"
        )
        statements = split_statements(script)

        assert statements == [script.strip()]

    def test_url_inside_routine_is_not_a_boundary(self):
        script = (
            "DELIMITER //\n"
            "CREATE PROCEDURE seed_images()\n"
            "BEGIN\n"
            "    UPDATE Property SET Image_URL = 'https://cdn.example.com//x.jpg';\n"
            "END //\n"
            "DELIMITER ;\n"
        )
        statements = split_statements(script)

        assert len(statements) == 1
        assert "https://cdn.example.com//x.jpg" in statements[0]

    def test_declared_custom_terminator(self):
        script = (
            "DELIMITER $$\n"
            "CREATE FUNCTION rent_due(r DECIMAL(10,2)) RETURNS DECIMAL(10,2) DETERMINISTIC\n"
            "BEGIN\n"
            "    RETURN r * 1.05;\n"
            "END $$\n"
            "DELIMITER ;\n"
            "SELECT rent_due(100);\n"
        )
        statements = split_statements(script)

        assert len(statements) == 2
        assert statements[0].endswith("END;")
        assert statements[1] == "SELECT rent_due(100);"

    def test_lowercase_end_keyword(self):
        script = "delimiter //\ncreate trigger t before insert on a for each row begin set new.id = 1; end//\ndelimiter ;\n"
        statements = split_statements(script)

        assert len(statements) == 1
        assert statements[0].endswith("end;")

    def test_end_suffix_of_identifier_is_not_a_routine_end(self):
        script = "SELECT backend FROM A //\n"
        assert split_statements(script) == ["SELECT backend FROM A //"]

    def test_delimiter_line_with_trailing_comment(self):
        script = (
            "DELIMITER //  -- routines\n"
            "CREATE PROCEDURE p() BEGIN SELECT 1; END //\n"
            "DELIMITER ;  # back to default\n"
            "SELECT 2;\n"
        )
        statements = split_statements(script)

        assert len(statements) == 2
        assert "DELIMITER" not in statements[0]
        assert statements[0].startswith("CREATE PROCEDURE p()")
        assert statements[0].endswith("END;")
        assert statements[1] == "SELECT 2;"

    def test_unsupported_delimiter_is_dropped(self, caplog):
        statements = split_statements("DELIMITER |\nSELECT 1;\nDELIMITER ;\n")

        assert statements == ["SELECT 1;"]
        assert "Unsupported DELIMITER" in caplog.text

    def test_empty_and_comment_only_segments_are_dropped(self):
        script = "-- header only\n//\n\n//\n/* block */\n//\nSELECT 1;\n"
        assert split_statements(script) == ["SELECT 1;"]

    def test_statement_with_leading_comment_is_kept(self):
        script = "-- Begin SOURCE /db/schema.sql\nCREATE TABLE A (id INT);\n"
        assert split_statements(script) == [script.strip()]

    def test_plain_script_is_one_unit(self):
        script = "CREATE TABLE A (id INT);\nCREATE TABLE B (id INT);\n"
        assert split_statements(script) == [script.strip()]


class TestHelpers:
    """Comment detection and keyword checks."""

    def test_is_comment_only(self):
        assert is_comment_only("-- a\n# b\n/* c\n d */\n")
        assert not is_comment_only("-- a\nSELECT 1;")

    def test_starts_with_keyword(self):
        assert starts_with_keyword("  USE property_db;", "USE")
        assert starts_with_keyword("use property_db;", "USE")
        assert starts_with_keyword("-- select db\nUSE property_db;", "USE")
        assert not starts_with_keyword("USERS_VIEW;", "USE")
        assert not starts_with_keyword("CREATE TABLE USE_LOG (id INT);", "USE")
