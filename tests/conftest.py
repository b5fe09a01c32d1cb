from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


GROOVY_BUILD = textwrap.dedent(
    """
    plugins {
        id 'java'
        id 'org.springframework.boot' version '2.7.0'
    }

    group = 'com.example'
    version = '1.0.0'
    sourceCompatibility = '11'

    repositories {
        mavenCentral()
        maven { url 'https://repo.example.com/releases' }
    }

    dependencies {
        implementation 'mysql:mysql-connector-java:8.0.29'
        implementation 'org.springframework.boot:spring-boot-starter-web'
        testImplementation 'junit:junit:4.13.2'
        implementation project(':core')
    }
    """
).lstrip()

KOTLIN_BUILD = textwrap.dedent(
    """
    plugins {
        id("org.jetbrains.kotlin.jvm") version "1.9.0"
    }

    repositories {
        mavenCentral()
    }

    dependencies {
        implementation("com.squareup.okhttp3:okhttp:4.11.0")
    }
    """
).lstrip()


@pytest.fixture()
def groovy_build() -> str:
    """Representative Groovy DSL build script."""
    return GROOVY_BUILD


@pytest.fixture()
def kotlin_build() -> str:
    return KOTLIN_BUILD


@pytest.fixture()
def build_file(tmp_path: Path) -> Path:
    """Write the Groovy sample to ``build.gradle`` inside ``tmp_path``."""
    path = tmp_path / "build.gradle"
    path.write_text(GROOVY_BUILD, encoding="utf-8")
    return path
