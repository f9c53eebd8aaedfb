import pytest

from openapi_to_code.pipeline import CodeGeneratorConfig, DiscriminatorPolicy, ValidationLibrary


class TestCodeGeneratorConfig:
    def test_defaults(self):
        config = CodeGeneratorConfig()
        assert not config.merge_patch
        assert config.validation_library == ValidationLibrary.JAVAX
        assert config.discriminator_policy == DiscriminatorPolicy.SETTABLE
        assert config.package_name == "models"
        assert config.max_workers == 1
        assert config.add_generation_comment

    def test_from_dict(self):
        config = CodeGeneratorConfig.from_dict(
            {
                "merge_patch": True,
                "validation_library": "jakarta",
                "discriminator_policy": "error",
                "ignore_classes": ["Internal"],
                "max_workers": 4,
                "unknown_option": 1,
            }
        )
        assert config.merge_patch
        assert config.validation_library == ValidationLibrary.JAKARTA
        assert config.discriminator_policy == DiscriminatorPolicy.ERROR
        assert config.ignore_classes == ["Internal"]
        assert config.max_workers == 4
        assert not hasattr(config, "unknown_option")

    def test_invalid_enum_value(self):
        with pytest.raises(ValueError):
            CodeGeneratorConfig.from_dict({"validation_library": "hibernate"})

    def test_round_trip(self):
        config = CodeGeneratorConfig(merge_patch=True, validation_library=ValidationLibrary.NO_VALIDATION, order_classes=["A", "B"])
        assert config.to_dict()["validation_library"] == "no_validation"
        assert CodeGeneratorConfig.from_dict(config.to_dict()) == config


if __name__ == "__main__":
    pytest.main([__file__])
