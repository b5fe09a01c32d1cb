from __future__ import annotations

import logging

import pytest

from ge.editing import GradleEditor
from ge.errors import BlockNotFoundError, EditError, NotFoundError
from ge.parsing import parse
from ge.structured import ModificationKind


def _editor(text: str, **options: str) -> GradleEditor:
    return GradleEditor(parse(text), **options)


def test_update_dependency_version_replaces_only_the_version(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.update_dependency_version("mysql", "mysql-connector-java", "8.0.30")

    modifications = editor.get_modifications()
    assert len(modifications) == 1
    assert modifications[0].kind is ModificationKind.REPLACE
    assert modifications[0].old_text == "'mysql:mysql-connector-java:8.0.29'"
    assert modifications[0].new_text == "'mysql:mysql-connector-java:8.0.30'"

    result = editor.apply()
    assert result == groovy_build.replace("8.0.29", "8.0.30")
    assert result.split("\n")[15] == "    implementation 'mysql:mysql-connector-java:8.0.30'"


def test_update_is_idempotent(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.update_dependency_version("mysql", "mysql-connector-java", "8.0.30")
    editor.update_dependency_version("mysql", "mysql-connector-java", "8.0.30")

    assert len(editor.modifications) == 1


def test_unchanged_value_records_nothing(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.update_dependency_version("mysql", "mysql-connector-java", "8.0.29")
    editor.update_property("group", "com.example")

    assert editor.modifications == ()


def test_in_memory_entity_tracks_pending_value(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.update_dependency_version("mysql", "mysql-connector-java", "8.0.30")

    entity = editor.index.dependencies[0]
    assert entity.value.version == "8.0.30"
    assert entity.raw_text == "'mysql:mysql-connector-java:8.0.30'"
    assert entity.range.span == (groovy_build.index("'mysql:"), groovy_build.index("'mysql:") + 35)


def test_repeated_edits_fold_into_one_replace(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.update_dependency_version("mysql", "mysql-connector-java", "8.0.30")
    editor.update_dependency_version("mysql", "mysql-connector-java", "8.0.31")

    (modification,) = editor.modifications
    assert modification.old_text == "'mysql:mysql-connector-java:8.0.29'"
    assert modification.new_text == "'mysql:mysql-connector-java:8.0.31'"

    editor.update_dependency_version("mysql", "mysql-connector-java", "8.0.29")
    assert editor.modifications == ()
    assert editor.apply() == groovy_build


def test_missing_version_is_appended(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.update_dependency_version("org.springframework.boot", "spring-boot-starter-web", "2.7.0")

    assert "    implementation 'org.springframework.boot:spring-boot-starter-web:2.7.0'\n" in editor.apply()


def test_unknown_dependency_raises_without_recording(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    with pytest.raises(NotFoundError):
        editor.update_dependency_version("com.example", "missing", "1.0")

    assert editor.modifications == ()


def test_project_references_are_not_versioned(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    with pytest.raises(NotFoundError):
        editor.update_dependency_version("", "core", "1.0")


def test_scope_disambiguates_duplicate_coordinates(caplog: pytest.LogCaptureFixture) -> None:
    text = "dependencies {\n    implementation 'g:n:1'\n    testImplementation 'g:n:1'\n}\n"

    scoped = _editor(text)
    scoped.update_dependency_version("g", "n", "2", scope="testImplementation")
    assert scoped.apply() == "dependencies {\n    implementation 'g:n:1'\n    testImplementation 'g:n:2'\n}\n"

    unscoped = _editor(text)
    with caplog.at_level(logging.WARNING, logger="ge.editing.editor"):
        unscoped.update_dependency_version("g", "n", "2")
    assert unscoped.apply() == "dependencies {\n    implementation 'g:n:2'\n    testImplementation 'g:n:1'\n}\n"
    assert "several scopes" in caplog.text


def test_update_plugin_version(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.update_plugin_version("org.springframework.boot", "3.1.0")
    editor.update_plugin_version("java", "17")

    lines = editor.apply().split("\n")
    assert lines[1] == "    id 'java' version '17'"
    assert lines[2] == "    id 'org.springframework.boot' version '3.1.0'"


def test_update_plugin_version_kotlin_call_syntax(kotlin_build: str) -> None:
    editor = _editor(kotlin_build)

    editor.update_plugin_version("org.jetbrains.kotlin.jvm", "1.9.20")

    assert editor.apply().split("\n")[1] == '    id("org.jetbrains.kotlin.jvm") version "1.9.20"'


def test_apply_plugin_declarations_have_no_version() -> None:
    editor = _editor("apply plugin: 'java'\n")

    with pytest.raises(NotFoundError):
        editor.update_plugin_version("java", "1.0")
    assert editor.modifications == ()


def test_update_property_preserves_quote_style(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.update_property("version", "1.1.0")

    assert editor.apply().split("\n")[6] == "version = '1.1.0'"


def test_update_property_keeps_unquoted_values_unquoted() -> None:
    text = 'android {\n    compileSdk = 33\n    namespace = "com.example.app"\n}\n'
    editor = _editor(text)

    editor.update_property("compileSdk", "34")
    editor.update_property("namespace", "com.example.next")

    assert editor.apply() == 'android {\n    compileSdk = 34\n    namespace = "com.example.next"\n}\n'


def test_update_repository_url(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.update_repository_url("repo.example.com", "https://mirror.example.com/releases")

    assert editor.apply().split("\n")[11] == "    maven { url 'https://mirror.example.com/releases' }"


def test_add_dependency_inserts_before_closing_brace(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.add_dependency("com.google.guava", "guava", "32.1.2-jre")

    (modification,) = editor.modifications
    assert modification.kind is ModificationKind.INSERT
    assert modification.range.is_point

    original = groovy_build.split("\n")
    lines = editor.apply().split("\n")
    assert lines[:19] == original[:19]
    assert lines[19] == "    implementation 'com.google.guava:guava:32.1.2-jre'"
    assert lines[20:] == original[19:]


def test_inserts_at_same_block_keep_submission_order(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.add_dependency("a", "first", "1")
    editor.add_dependency("b", "second", "2", scope="testImplementation")

    lines = editor.apply().split("\n")
    assert lines[19] == "    implementation 'a:first:1'"
    assert lines[20] == "    testImplementation 'b:second:2'"
    assert lines[21] == "}"


def test_add_dependency_prefers_top_level_block() -> None:
    text = (
        "buildscript {\n"
        "    dependencies {\n"
        "        classpath 'com.android.tools.build:gradle:8.1.0'\n"
        "    }\n"
        "}\n"
        "\n"
        "dependencies {\n"
        "    implementation 'a:b:1'\n"
        "}\n"
    )
    editor = _editor(text)

    editor.add_dependency("c", "d", "2")

    assert editor.apply() == text.replace(
        "    implementation 'a:b:1'\n}\n",
        "    implementation 'a:b:1'\n    implementation 'c:d:2'\n}\n",
    )


def test_add_dependency_ignores_braces_in_strings_and_comments() -> None:
    text = "dependencies {\n    implementation 'a:b:1' // }\n    println '{'\n}\n"
    editor = _editor(text)

    editor.add_dependency("c", "d")

    assert editor.apply().split("\n")[3] == "    implementation 'c:d'"


@pytest.mark.parametrize(
    "text",
    [
        "plugins {\n    id 'java'\n}\n",
        "dependencies {\n    implementation 'a:b:1'\n",
        "dependencies { }\n",
    ],
)
def test_add_dependency_requires_a_multiline_block(text: str) -> None:
    editor = _editor(text)

    with pytest.raises(BlockNotFoundError):
        editor.add_dependency("c", "d", "1")
    assert editor.modifications == ()


def test_add_plugin_and_repository(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.add_plugin("jacoco")
    editor.add_repository("google")
    editor.add_repository("https://jitpack.io")

    lines = editor.apply().split("\n")
    assert lines[3] == "    id 'jacoco'"
    assert lines[4] == "}"
    assert lines[13] == "    google()"
    assert lines[14] == "    maven { url 'https://jitpack.io' }"
    assert lines[15] == "}"


def test_kotlin_files_get_call_syntax(kotlin_build: str) -> None:
    editor = _editor(kotlin_build)

    editor.add_dependency("com.google.guava", "guava", "32.1.2-jre")
    editor.add_plugin("org.jetbrains.kotlin.plugin.spring", "1.9.0")
    editor.add_repository("https://jitpack.io")

    result = editor.apply()
    assert '    implementation("com.google.guava:guava:32.1.2-jre")\n}' in result
    assert '    id("org.jetbrains.kotlin.plugin.spring") version "1.9.0"\n}' in result
    assert '    maven { url = uri("https://jitpack.io") }\n}' in result


def test_indent_and_quote_are_configurable(groovy_build: str) -> None:
    editor = _editor(groovy_build, indent="\t", quote='"', default_scope="api")

    editor.add_dependency("g", "n", "1")

    assert '\tapi "g:n:1"\n}' in editor.apply()


def test_remove_dependency_deletes_the_whole_line(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.remove_dependency("junit", "junit")

    (modification,) = editor.modifications
    assert modification.kind is ModificationKind.DELETE
    assert modification.old_text == "    testImplementation 'junit:junit:4.13.2'\n"
    assert editor.apply() == groovy_build.replace("    testImplementation 'junit:junit:4.13.2'\n", "")


def test_remove_dependency_supersedes_pending_update(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.update_dependency_version("mysql", "mysql-connector-java", "8.0.30")
    editor.remove_dependency("mysql", "mysql-connector-java")

    assert [modification.kind for modification in editor.modifications] == [ModificationKind.DELETE]
    with pytest.raises(NotFoundError):
        editor.update_dependency_version("mysql", "mysql-connector-java", "8.0.31")


def test_remove_dependency_on_last_line_without_newline() -> None:
    editor = _editor("implementation 'a:b:1'\nimplementation 'c:d:2'")

    editor.remove_dependency("c", "d")

    assert editor.apply() == "implementation 'a:b:1'"


def test_remove_and_insert_in_one_session(groovy_build: str) -> None:
    editor = _editor(groovy_build)

    editor.remove_dependency("junit", "junit")
    editor.add_dependency("org.junit.jupiter", "junit-jupiter", "5.10.0", scope="testImplementation")

    lines = editor.apply().split("\n")
    assert lines[16] == "    implementation 'org.springframework.boot:spring-boot-starter-web'"
    assert lines[17] == "    implementation project(':core')"
    assert lines[18] == "    testImplementation 'org.junit.jupiter:junit-jupiter:5.10.0'"
    assert lines[19] == "}"


def test_clear_discards_modifications_but_keeps_values(groovy_build: str) -> None:
    editor = _editor(groovy_build)
    editor.update_dependency_version("mysql", "mysql-connector-java", "8.0.30")

    editor.clear()

    assert editor.modifications == ()
    assert editor.index.dependencies[0].value.version == "8.0.30"
    assert editor.apply() == groovy_build


def test_apply_does_not_consume_modifications(groovy_build: str) -> None:
    editor = _editor(groovy_build)
    editor.update_property("version", "2.0.0")

    first = editor.apply()
    second = editor.apply()

    assert first == second
    assert len(editor.modifications) == 1


def test_remove_dependency_refuses_a_line_shared_with_other_code() -> None:
    text = "dependencies { implementation 'a:b:1' }\nrepositories {\n    mavenCentral()\n}\n"
    editor = _editor(text)

    with pytest.raises(EditError, match="shares line 1"):
        editor.remove_dependency("a", "b")

    assert editor.modifications == ()
    assert editor.apply() == text


def test_remove_dependency_accepts_call_wrapper_and_trailing_comment() -> None:
    text = 'dependencies {\n    implementation("a:b:1") // pinned\n    api("c:d:2")\n}\n'
    editor = _editor(text)

    editor.remove_dependency("a", "b")

    assert editor.apply() == 'dependencies {\n    api("c:d:2")\n}\n'


def test_update_property_keeps_trailing_comment() -> None:
    editor = _editor("version = '1.0' // release train\ncompileSdk = 33 // android 13\n")

    editor.update_property("version", "2.0")
    editor.update_property("compileSdk", "34")

    assert editor.apply() == "version = '2.0' // release train\ncompileSdk = 34 // android 13\n"


def test_update_after_clear_anchors_to_original_text() -> None:
    text = "dependencies {\n    implementation 'a:b:1'\n}\n"
    editor = _editor(text)
    editor.update_dependency_version("a", "b", "2")

    editor.clear()
    editor.update_dependency_version("a", "b", "3")

    (modification,) = editor.modifications
    assert modification.old_text == "'a:b:1'"
    assert editor.apply() == "dependencies {\n    implementation 'a:b:3'\n}\n"
