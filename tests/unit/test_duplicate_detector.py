"""
Unit tests for DuplicateDetector.find_similar_patients().

用内存版 record source，不需要数据库。覆盖：
1. MRN 完全一致 → 只产生 DUPLICATE_PATIENT，不打分
2. 场景 A/B/C（同名不同 MRN / 名字拼错 / 完全不同）
3. 阈值边界：等于阈值算相似，低于阈值不算
4. 只取最近 N 条；输出顺序 = 取回顺序；不合并
5. has_same_medication 标记
6. record source 异常原样抛出
"""
import math

import pytest

from intake.dedup import (
    DetectionConfig,
    DuplicateDetector,
    DuplicatePatientWarning,
    MatchCandidate,
    PatientSimilarityScorer,
    SimilarPatientWarning,
)
from tests.conftest import InMemoryRecordSource, make_record


JOHN_SMITH = make_record('p1', 'John', 'Smith', '123456')


def detect(records, candidate, medications=None, config=None):
    source = InMemoryRecordSource(records, medications)
    return DuplicateDetector(source, config).find_similar_patients(candidate)


class TestExactIdentifier:

    def test_same_mrn_different_name_is_duplicate_not_similar(self):
        warnings = detect([JOHN_SMITH], MatchCandidate('Zed', 'Quill', '123456'))

        assert len(warnings) == 1
        assert isinstance(warnings[0], DuplicatePatientWarning)
        assert warnings[0].type == 'DUPLICATE_PATIENT'
        assert warnings[0].severity == 'high'
        assert warnings[0].existing_patient == JOHN_SMITH
        assert warnings[0].can_link_to_existing is True

    def test_exact_match_is_never_scored(self):
        class ExplodingScorer(PatientSimilarityScorer):
            def score(self, candidate, existing):
                raise AssertionError('should not be scored')

        source = InMemoryRecordSource([JOHN_SMITH])
        detector = DuplicateDetector(source, scorer=ExplodingScorer())
        warnings = detector.find_similar_patients(MatchCandidate('John', 'Smith', '123456'))

        assert [w.type for w in warnings] == ['DUPLICATE_PATIENT']

    def test_identifier_match_is_case_sensitive_exact(self):
        existing = make_record('p2', 'Ann', 'Lee', 'AB1234')
        warnings = detect([existing], MatchCandidate('Ann', 'Lee', 'ab1234'))

        # 不是完全相同的 MRN → 走打分，打分时忽略大小写
        assert len(warnings) == 1
        assert warnings[0].type == 'SIMILAR_PATIENT'
        assert warnings[0].similarity_score == pytest.approx(1.0)


class TestScenarios:

    def test_same_name_different_identifier_is_similar(self):
        warnings = detect([JOHN_SMITH], MatchCandidate('John', 'Smith', '654321'))

        assert len(warnings) == 1
        warning = warnings[0]
        assert isinstance(warning, SimilarPatientWarning)
        assert warning.severity == 'medium'
        assert warning.similarity_score > 0.7
        assert warning.similar_patient == JOHN_SMITH
        assert 'John Smith (MRN: 123456)' in warning.message
        assert f"{round(warning.similarity_score * 100)}% match" in warning.message

    def test_first_name_typo_is_similar(self):
        warnings = detect([JOHN_SMITH], MatchCandidate('Jon', 'Smith', '123457'))

        assert len(warnings) == 1
        assert warnings[0].type == 'SIMILAR_PATIENT'
        assert 0.7 < warnings[0].similarity_score < 1.0

    def test_dissimilar_patient_produces_no_warning(self):
        assert detect([JOHN_SMITH], MatchCandidate('Jane', 'Doe', '654321')) == []

    def test_no_existing_records(self):
        assert detect([], MatchCandidate('John', 'Smith', '123456')) == []


class TestMessage:

    def test_percentage_rounds_half_up(self):
        class FixedScorer(PatientSimilarityScorer):
            def score(self, candidate, existing):
                return 0.625

        source = InMemoryRecordSource([JOHN_SMITH])
        detector = DuplicateDetector(source, DetectionConfig(similarity_threshold=0.5), scorer=FixedScorer())
        warnings = detector.find_similar_patients(MatchCandidate('Jon', 'Smith', '654321'))

        assert warnings[0].message.endswith('- 63% match')


class TestThreshold:

    CANDIDATE = MatchCandidate('John', 'Smith', '654321')

    def exact_score(self):
        return PatientSimilarityScorer().score(self.CANDIDATE, JOHN_SMITH)

    def test_score_equal_to_threshold_is_included(self):
        config = DetectionConfig(similarity_threshold=self.exact_score())
        warnings = detect([JOHN_SMITH], self.CANDIDATE, config=config)
        assert len(warnings) == 1

    def test_score_just_below_threshold_is_excluded(self):
        threshold = math.nextafter(self.exact_score(), 1.0)
        config = DetectionConfig(similarity_threshold=threshold)
        assert detect([JOHN_SMITH], self.CANDIDATE, config=config) == []


class TestCandidateSet:

    def test_requests_configured_record_limit(self):
        source = InMemoryRecordSource([JOHN_SMITH])
        DuplicateDetector(source, DetectionConfig(max_records_to_check=25)).find_similar_patients(
            MatchCandidate('A', 'B', '000000')
        )
        assert source.requested_limits == [25]

    def test_records_beyond_limit_are_not_checked(self):
        records = [make_record(f'p{i}', 'Other', 'Person', f'{200000 + i}') for i in range(3)]
        records.append(JOHN_SMITH)  # 第 4 条，超出 limit
        config = DetectionConfig(max_records_to_check=3)

        warnings = detect(records, MatchCandidate('John', 'Smith', '123456'), config=config)
        assert warnings == []

    def test_every_match_reported_in_fetch_order(self):
        records = [
            make_record('newest', 'Jon', 'Smith', '555555'),
            make_record('other', 'Jane', 'Doe', '777777'),
            make_record('dup', 'Johnny', 'Smith', '123456'),
            make_record('oldest', 'John', 'Smyth', '999999'),
        ]
        warnings = detect(records, MatchCandidate('John', 'Smith', '123456'))

        ids = [
            (w.existing_patient if w.type == 'DUPLICATE_PATIENT' else w.similar_patient).id
            for w in warnings
        ]
        assert ids == ['newest', 'dup', 'oldest']
        assert [w.type for w in warnings] == ['SIMILAR_PATIENT', 'DUPLICATE_PATIENT', 'SIMILAR_PATIENT']

    def test_identical_similar_records_are_not_merged(self):
        records = [make_record(f'p{i}', 'John', 'Smith', f'65432{i}') for i in range(3)]
        warnings = detect(records, MatchCandidate('John', 'Smith', '123456'))
        assert len(warnings) == 3


class TestSameMedication:

    def test_duplicate_with_same_medication(self):
        warnings = detect(
            [JOHN_SMITH],
            MatchCandidate('John', 'Smith', '123456', medication_name='  ivig '),
            medications={'p1': ['Humira', 'IVIG']},
        )
        assert warnings[0].has_same_medication is True
        assert 'has an order for' in warnings[0].message

    def test_duplicate_with_other_medication(self):
        warnings = detect(
            [JOHN_SMITH],
            MatchCandidate('John', 'Smith', '123456', medication_name='IVIG'),
            medications={'p1': ['Humira']},
        )
        assert warnings[0].has_same_medication is False
        assert 'add this order to the existing patient' in warnings[0].message

    def test_similar_with_same_medication(self):
        warnings = detect(
            [JOHN_SMITH],
            MatchCandidate('Jon', 'Smith', '123457', medication_name='Humira'),
            medications={'p1': ['humira']},
        )
        assert warnings[0].type == 'SIMILAR_PATIENT'
        assert warnings[0].has_same_medication is True

    def test_no_medication_supplied_skips_lookup(self):
        class NoLookupSource(InMemoryRecordSource):
            def medication_names(self, record_id):
                raise AssertionError('should not look up medications')

        detector = DuplicateDetector(NoLookupSource([JOHN_SMITH]))
        warnings = detector.find_similar_patients(MatchCandidate('John', 'Smith', '123456'))
        assert warnings[0].has_same_medication is False


class TestFailures:

    def test_source_error_propagates(self):
        class BrokenSource(InMemoryRecordSource):
            def recent_records(self, limit):
                raise ConnectionError('database unavailable')

        detector = DuplicateDetector(BrokenSource())
        with pytest.raises(ConnectionError):
            detector.find_similar_patients(MatchCandidate('John', 'Smith', '123456'))
