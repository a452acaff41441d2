from consensus.normalize import TextMapping


def test_convert_is_deterministic_and_resolvable():
    tm = TextMapping()
    line = "Serine/threonine-protein kinase"
    first = tm.convert(line, expand_subphrases=True)
    second = tm.convert(line, expand_subphrases=True)
    assert first == second == "serine threonine-protein kinase"
    assert tm.retrieve_original(first) == line
    # every contiguous sub-phrase is registered too
    assert tm.retrieve_original("kinase") == "kinase"
    assert tm.retrieve_original("threonine-protein kinase") == "threonine-protein kinase"


def test_tie_break_prefers_mixed_case_whatever_the_order():
    for order in (("ABC kinase", "abc kinase"), ("abc kinase", "ABC kinase")):
        tm = TextMapping()
        for line in order:
            tm.convert(line)
        assert tm.retrieve_original("abc kinase") == "ABC kinase"


def test_reordering_shares_one_entry():
    tm = TextMapping()
    a = tm.convert("signaling enzyme", allow_reordering=True)
    b = tm.convert("enzyme signaling", allow_reordering=True)
    # training text keeps the original order, the lookup key does not
    assert a == "signal enzyme" and b == "enzyme signal"
    assert len(tm) == 1
    assert tm.retrieve_original("enzyme signal") == "enzyme signaling"


def test_generic_descriptions_are_unified_and_clean_resets():
    tm = TextMapping()
    key = tm.convert("Hypothetical protein")
    assert tm.retrieve_original(key) == "conserved unknown protein"
    tm.clean()
    assert len(tm) == 0
    assert tm.retrieve_original(key) is None


def test_unification_can_be_disabled():
    tm = TextMapping(unify_unknowns=False)
    key = tm.convert("unknown protein")
    assert tm.retrieve_original(key) == "unknown protein"


def test_lowercase_and_stemming_switches():
    tm = TextMapping(lowercase=False, stemming=False)
    assert tm.convert("Kinases (ATP)") == "Kinases ATP"
    assert TextMapping().convert("Kinases (ATP)") == "kinase atp"


def test_edge_underscores_tokenize_like_their_subphrases():
    for line in ("_abc def", "abc def_", "x __abc_ (def)"):
        tm = TextMapping()
        toks = tm.convert(line, expand_subphrases=True).split()
        assert "_" not in "".join(toks)
        for size in range(1, len(toks) + 1):
            for start in range(0, len(toks) - size + 1):
                assert tm.retrieve_original(" ".join(toks[start:start + size])) is not None
