"""Documentation reading, SKILL.md synthesis and .env.example rendering."""

from skillpack.skills.docs import generate_env_example, read_docs, synthesize_descriptor
from skillpack.skills.parser import split_front_matter
from skillpack.skills.requirements import RequirementsExtractor


class TestReadDocs:
    def test_best_doc_prefers_skill_md(self, registry):
        docs = read_docs(registry.require("deep-research"))
        assert docs.skill_md.startswith("---")
        assert docs.readme is None
        assert docs.best_doc() == docs.skill_md

    def test_best_doc_falls_back_to_readme(self, registry):
        docs = read_docs(registry.require("image"))
        assert docs.skill_md is None
        assert docs.best_doc() == docs.readme

    def test_no_docs(self, registry):
        assert read_docs(registry.require("todo")).best_doc() is None


class TestSynthesizeDescriptor:
    """SKILL.md written for agent installs"""

    def test_existing_skill_md_is_used_verbatim(self, registry):
        meta = registry.require("deep-research")
        assert synthesize_descriptor(meta) == (meta.source_dir / "SKILL.md").read_text()

    def test_generated_from_readme(self, registry):
        meta = registry.require("image")
        text = synthesize_descriptor(meta, RequirementsExtractor().extract(meta))

        front, body = split_front_matter(text)
        assert front == {"name": "image", "description": "Generate images with AI providers"}
        assert body.lstrip().startswith("# Image Generator\n")
        # README title dropped, the rest kept
        assert body.count("# Image Generator") == 1
        assert "Create images from prompts." in body
        assert "## CLI" in body
        assert "skill-image --help" in body
        assert "Category: Content Generation" in body
        assert body.rstrip().endswith("Tags: image, generation, ai")

    def test_no_cli_section_without_command(self, registry):
        text = synthesize_descriptor(registry.require("todo"))
        assert "## CLI" not in text
        assert "Track todos in plain text" in text

    def test_front_matter_is_valid_yaml_for_awkward_descriptions(self, registry, tmp_path):
        meta = registry.require("todo")
        odd = type(meta)(
            name="odd",
            display_name="Odd",
            description="Colons: quotes \" and # hashes",
            category=meta.category,
            source_dir=meta.source_dir,
        )
        front, _ = split_front_matter(synthesize_descriptor(odd))
        assert front["description"] == "Colons: quotes \" and # hashes"

    def test_missing_source_dir_gives_none(self, registry, tmp_path):
        meta = registry.require("todo")
        gone = type(meta)(
            name="gone",
            display_name="Gone",
            description="Gone",
            category=meta.category,
            source_dir=tmp_path / "does-not-exist",
        )
        assert synthesize_descriptor(gone) is None


class TestGenerateEnvExample:
    def test_empty(self):
        assert generate_env_example({}) == ""

    def test_grouped_by_prefix(self):
        text = generate_env_example(
            {
                "OPENAI_API_KEY": ["image", "audio"],
                "EXA_API_KEY": ["deep-research"],
                "OPENAI_ORG_ID": ["image"],
            }
        )
        assert text == (
            "# Environment variables for installed skills\n"
            "# Auto-generated by: skills init\n"
            "\n"
            "# EXA\n"
            "# Used by: deep-research\n"
            "EXA_API_KEY=\n"
            "\n"
            "# OPENAI\n"
            "# Used by: image, audio\n"
            "OPENAI_API_KEY=\n"
            "# Used by: image\n"
            "OPENAI_ORG_ID=\n"
        )

    def test_output_parses_as_env_assignments(self):
        text = generate_env_example({"A_KEY": ["x"]})
        keys = [line.split("=")[0] for line in text.splitlines() if line and not line.startswith("#")]
        assert keys == ["A_KEY"]
