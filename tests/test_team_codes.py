import pytest

from league_tracker.team_codes import CANONICAL_TEAM_CODES, TeamCodeNormalizer


@pytest.mark.unit
class TestNormalize:
    @pytest.mark.parametrize("alias, canonical", [("WSH", "WAS"), ("JAC", "JAX"), ("OAK", "LV"), ("SD", "LAC"), ("STL", "LAR")])
    def test_aliases_map_to_canonical(self, normalizer, alias, canonical):
        assert normalizer.normalize(alias) == canonical

    def test_wsh_and_was_share_a_code(self, normalizer):
        assert normalizer.normalize("WSH") == normalizer.normalize("WAS")
        assert normalizer.normalize("JAC") == normalizer.normalize("JAX")

    def test_case_and_whitespace_are_ignored(self, normalizer):
        assert normalizer.normalize(" wsh ") == "WAS"
        assert normalizer.normalize("kc") == "KC"

    def test_unknown_codes_come_back_uppercased(self, normalizer):
        assert normalizer.normalize("xyz") == "XYZ"

    @pytest.mark.parametrize("code", [None, "", "   "])
    def test_absent_codes_normalize_to_none(self, normalizer, code):
        assert normalizer.normalize(code) is None

    def test_every_canonical_target_is_a_fixed_point(self, normalizer):
        for target in set(CANONICAL_TEAM_CODES.values()):
            assert normalizer.normalize(target) == target


@pytest.mark.unit
class TestAliasLookups:
    def test_aliases_of_lists_canonical_first(self, normalizer):
        assert normalizer.aliases_of("LV") == ["LV", "LVR", "OAK"]
        assert normalizer.aliases_of("oak") == ["LV", "LVR", "OAK"]

    def test_aliases_of_team_without_aliases(self, normalizer):
        assert normalizer.aliases_of("BUF") == ["BUF"]

    def test_are_equivalent(self, normalizer):
        assert normalizer.are_equivalent("WSH", "was")
        assert not normalizer.are_equivalent("KC", "LV")
        assert not normalizer.are_equivalent(None, None)

    def test_display_name(self, normalizer):
        assert normalizer.display_name("JAC") == "Jacksonville Jaguars"
        assert normalizer.display_name("XYZ") is None

    def test_custom_alias_table(self):
        custom = TeamCodeNormalizer({"HOU": "HOU", "HTX": "HOU"})
        assert custom.normalize("htx") == "HOU"
        assert custom.normalize("WSH") == "WSH"
