"""
Pre-order indexing tests.
"""

from parsing.indexing import INDEX_ATTR, element_index, index_elements


class TestIndexElements:
    def test_text_nodes_consume_indices(self, soup_of):
        soup = soup_of("<div><p>a</p>b<span>c</span></div>")
        root = soup.div
        index_map = index_elements(root)
        assert root[INDEX_ATTR] == "1"
        assert soup.p[INDEX_ATTR] == "2"
        assert soup.span[INDEX_ATTR] == "5"
        assert index_map[3] == "a"
        assert index_map[4] == "b"
        assert len(index_map) == 6

    def test_indices_unique_and_increasing_in_preorder(self, soup_of):
        soup = soup_of(
            "<body><div><p>one <b>two</b></p><!-- note --><ul><li>x</li><li>y</li></ul></div>"
            "<section><h1>Title</h1><p>z</p></section></body>"
        )
        index_elements(soup.body)
        indices = [element_index(el) for el in [soup.body, *soup.body.find_all(True)]]
        assert None not in indices
        assert len(set(indices)) == len(indices)
        assert indices == sorted(indices)
        assert indices[0] == 1

    def test_reindex_after_mutation_starts_from_one(self, soup_of):
        soup = soup_of("<div><p>a</p><p>b</p></div>")
        index_elements(soup.div)
        second = soup.find_all("p")[1]
        assert second[INDEX_ATTR] == "4"
        soup.p.extract()
        index_elements(soup.div)
        assert second[INDEX_ATTR] == "2"

    def test_only_elements_are_stamped(self, soup_of):
        soup = soup_of("<div>text</div>")
        index_elements(soup.div)
        assert soup.div.string == "text"
        assert list(soup.div.attrs) == [INDEX_ATTR]


class TestElementIndex:
    def test_missing_attribute(self, soup_of):
        soup = soup_of("<p>x</p>")
        assert element_index(soup.p) is None

    def test_garbage_attribute(self, soup_of):
        soup = soup_of(f'<p {INDEX_ATTR}="abc">x</p>')
        assert element_index(soup.p) is None

    def test_parses_value(self, soup_of):
        soup = soup_of(f'<p {INDEX_ATTR}="42">x</p>')
        assert element_index(soup.p) == 42
